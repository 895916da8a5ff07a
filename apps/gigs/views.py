from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from drf_yasg.utils import swagger_auto_schema
from drf_yasg import openapi
from .models import Gig, Review
from .serializers import (
    GigSerializer, GigDetailSerializer, ApplicantSerializer, ApplySerializer,
    DecisionSerializer, InviteSerializer, GigRequestSerializer,
)
from .review_serializers import ReviewSerializer, SubmitReviewSerializer, ReplySerializer
from .services import ApplicantManager, ReviewAggregator
from apps.users.models import Student
from apps.users.serializers import PublicStudentSerializer
from core.utils import IsClient, IsStudent
import logging

logger = logging.getLogger(__name__)

ERROR_SCHEMA = openapi.Schema(
    type=openapi.TYPE_OBJECT,
    properties={
        'error': openapi.Schema(type=openapi.TYPE_STRING),
        'code': openapi.Schema(type=openapi.TYPE_STRING),
    }
)

class GigCreateView(APIView):
    permission_classes = [IsAuthenticated, IsClient]

    @swagger_auto_schema(
        operation_description="Post a new gig. The gig starts in the 'open' state.",
        request_body=GigSerializer,
        responses={201: GigSerializer, 400: 'Bad Request', 401: 'Unauthorized', 403: 'Forbidden'}
    )
    def post(self, request):
        serializer = GigSerializer(data=request.data, context={'request': request})
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

class ClientGigListView(APIView):
    permission_classes = [IsAuthenticated, IsClient]

    @swagger_auto_schema(
        operation_description="List the gigs posted by the authenticated client, newest first.",
        responses={200: GigSerializer(many=True), 401: 'Unauthorized', 403: 'Forbidden'}
    )
    def get(self, request):
        gigs = Gig.objects.filter(client=request.user).select_related('selected_student')
        serializer = GigSerializer(gigs, many=True)
        return Response(serializer.data)

class GigDetailView(APIView):
    permission_classes = [IsAuthenticated]

    @swagger_auto_schema(
        operation_description="Retrieve a gig. The owning client also sees its applicants and reviews.",
        responses={200: GigDetailSerializer, 401: 'Unauthorized', 404: 'Not Found'}
    )
    def get(self, request, id):
        try:
            gig = Gig.objects.select_related('client', 'selected_student').get(pk=id)
        except Gig.DoesNotExist:
            return Response({"error": "Gig not found", "code": "gig_not_found"}, status=status.HTTP_404_NOT_FOUND)
        if gig.client_id == request.user.id:
            return Response(GigDetailSerializer(gig).data)
        return Response(GigSerializer(gig).data)

class GigUpdateView(APIView):
    permission_classes = [IsAuthenticated, IsClient]

    @swagger_auto_schema(
        operation_description="Edit an open gig. Status and ownership cannot be changed here.",
        request_body=GigSerializer,
        responses={200: GigSerializer, 400: 'Bad Request', 404: 'Not Found', 409: ERROR_SCHEMA}
    )
    def put(self, request, id):
        try:
            gig = Gig.objects.get(pk=id, client=request.user)
        except Gig.DoesNotExist:
            return Response({"error": "Gig not found or not authorized", "code": "gig_not_found"}, status=status.HTTP_404_NOT_FOUND)

        serializer = GigSerializer(gig, data=request.data, partial=True, context={'request': request})
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

class GigCloseView(APIView):
    permission_classes = [IsAuthenticated, IsClient]

    @swagger_auto_schema(
        operation_description="Close an open gig without selecting anyone.",
        responses={200: GigSerializer, 403: ERROR_SCHEMA, 404: ERROR_SCHEMA, 409: ERROR_SCHEMA}
    )
    def post(self, request, id):
        gig = ApplicantManager.close_gig(id, request.user.id)
        return Response(GigSerializer(gig).data)

class GigApplyView(APIView):
    permission_classes = [IsAuthenticated, IsStudent]

    @swagger_auto_schema(
        operation_description="Apply to an open gig with an optional message.",
        request_body=ApplySerializer,
        responses={
            201: ApplicantSerializer,
            400: 'Bad Request',
            403: ERROR_SCHEMA,
            404: ERROR_SCHEMA,
            409: openapi.Response('Already applied or gig not open', ERROR_SCHEMA)
        }
    )
    def post(self, request, id):
        serializer = ApplySerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        applicant = ApplicantManager.apply(
            id, request.user.id, request.user.display_name, serializer.validated_data.get('message')
        )
        return Response(ApplicantSerializer(applicant).data, status=status.HTTP_201_CREATED)

class GigApplicantsListView(APIView):
    permission_classes = [IsAuthenticated, IsClient]

    @swagger_auto_schema(
        operation_description="List applicants for a gig in application order (client must own the gig).",
        responses={200: ApplicantSerializer(many=True), 401: 'Unauthorized', 404: 'Not Found'}
    )
    def get(self, request, id):
        try:
            gig = Gig.objects.get(pk=id, client=request.user)
        except Gig.DoesNotExist:
            return Response({"error": "Gig not found or not authorized", "code": "gig_not_found"}, status=status.HTTP_404_NOT_FOUND)
        serializer = ApplicantSerializer(gig.applicants.all(), many=True)
        return Response(serializer.data)

class ApplicantDecisionView(APIView):
    permission_classes = [IsAuthenticated, IsClient]

    @swagger_auto_schema(
        operation_description="Accept or reject a pending applicant. Accepting starts the gig.",
        request_body=DecisionSerializer,
        responses={
            200: GigSerializer,
            400: 'Bad Request',
            403: ERROR_SCHEMA,
            404: ERROR_SCHEMA,
            409: openapi.Response('Already decided or invalid gig state', ERROR_SCHEMA)
        }
    )
    def post(self, request, id, student_id):
        serializer = DecisionSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        gig = ApplicantManager.decide(id, student_id, serializer.validated_data['decision'], request.user.id)
        return Response(GigSerializer(gig).data)

class GigInviteView(APIView):
    permission_classes = [IsAuthenticated, IsClient]

    @swagger_auto_schema(
        operation_description="Invite a specific student to an open gig.",
        request_body=InviteSerializer,
        responses={201: GigRequestSerializer, 400: 'Bad Request', 403: ERROR_SCHEMA, 404: ERROR_SCHEMA, 409: ERROR_SCHEMA}
    )
    def post(self, request, id):
        serializer = InviteSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        gig_request = ApplicantManager.invite(id, serializer.validated_data['student_id'], request.user.id)
        return Response(GigRequestSerializer(gig_request).data, status=status.HTTP_201_CREATED)

class GigReviewView(APIView):
    permission_classes = [IsAuthenticated, IsClient]

    @swagger_auto_schema(
        operation_description="Rate the selected student of a completed gig (1-5 stars, once per gig).",
        request_body=SubmitReviewSerializer,
        responses={201: ReviewSerializer, 400: ERROR_SCHEMA, 403: ERROR_SCHEMA, 404: ERROR_SCHEMA, 409: ERROR_SCHEMA}
    )
    def post(self, request, id):
        serializer = SubmitReviewSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        review = ReviewAggregator.submit_review(
            id, request.user.id, serializer.validated_data['rating'], serializer.validated_data.get('comment')
        )
        return Response(ReviewSerializer(review).data, status=status.HTTP_201_CREATED)

class ReviewReplyView(APIView):
    permission_classes = [IsAuthenticated, IsStudent]

    @swagger_auto_schema(
        operation_description="Reply to a review as the reviewed student. A second reply replaces the first.",
        request_body=ReplySerializer,
        responses={200: ReviewSerializer, 400: ERROR_SCHEMA, 403: ERROR_SCHEMA, 404: ERROR_SCHEMA}
    )
    def post(self, request, review_id):
        serializer = ReplySerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        review = ReviewAggregator.reply_to_review(review_id, request.user.id, serializer.validated_data['text'])
        return Response(ReviewSerializer(review).data)

class StudentReviewsView(APIView):
    permission_classes = [IsAuthenticated]

    @swagger_auto_schema(
        operation_description="Public rating summary and reviews of a student.",
        responses={
            200: openapi.Response(
                description='Student profile and reviews',
                schema=openapi.Schema(
                    type=openapi.TYPE_OBJECT,
                    properties={
                        'student': openapi.Schema(type=openapi.TYPE_OBJECT),
                        'reviews': openapi.Schema(type=openapi.TYPE_ARRAY, items=openapi.Schema(type=openapi.TYPE_OBJECT)),
                    }
                )
            ),
            404: 'Not Found'
        }
    )
    def get(self, request, student_id):
        try:
            student = Student.objects.select_related('user').get(user_id=student_id)
        except Student.DoesNotExist:
            return Response({"error": "Student not found", "code": "not_found"}, status=status.HTTP_404_NOT_FOUND)
        reviews = Review.objects.filter(student_id=student_id).select_related('client')
        return Response({
            'student': PublicStudentSerializer(student).data,
            'reviews': ReviewSerializer(reviews, many=True).data,
        })
