from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from drf_yasg.utils import swagger_auto_schema
from drf_yasg import openapi
from django.conf import settings
from apps.gigs.models import Gig
from apps.gigs.serializers import GigSerializer
from core.constants import GIG_STATUS_OPEN
from core.utils import IsStudent
from .utils import DiscoveryEngine, excluded_gig_ids_for, parse_payout
import logging

logger = logging.getLogger(__name__)

class DiscoverGigsView(APIView):
    permission_classes = [IsAuthenticated, IsStudent]

    @swagger_auto_schema(
        operation_description="Open gigs ranked for the authenticated student: gigs from followed clients first, "
                              "then gigs matching the student's skills, then the rest, newest first in each group.",
        manual_parameters=[
            openapi.Parameter('skills', openapi.IN_QUERY, type=openapi.TYPE_STRING,
                              description='Comma-separated skills; keeps gigs requiring at least one of them'),
            openapi.Parameter('min_payout', openapi.IN_QUERY, type=openapi.TYPE_NUMBER,
                              description='Minimum net payout (inclusive)'),
            openapi.Parameter('max_payout', openapi.IN_QUERY, type=openapi.TYPE_NUMBER,
                              description='Maximum net payout (inclusive)'),
        ],
        responses={200: GigSerializer(many=True), 400: 'Bad Request', 401: 'Unauthorized', 403: 'Forbidden'}
    )
    def get(self, request):
        student = request.user.student
        try:
            min_payout = parse_payout(request.query_params.get('min_payout'))
            max_payout = parse_payout(request.query_params.get('max_payout'))
        except ValueError as e:
            return Response({"error": str(e), "code": "invalid_input"}, status=status.HTTP_400_BAD_REQUEST)

        skills_filter = [
            s for raw in request.query_params.getlist('skills') for s in raw.split(',') if s.strip()
        ]

        gigs = list(Gig.objects.filter(status=GIG_STATUS_OPEN).select_related('selected_student'))
        ranked = DiscoveryEngine.rank(
            gigs,
            viewer_skills=student.skills,
            followed_ids=set(student.following.values_list('id', flat=True)),
            blocked_ids=set(student.blocked_users.values_list('id', flat=True)),
            excluded_gig_ids=excluded_gig_ids_for(request.user),
            skills_filter=skills_filter,
            min_payout=min_payout,
            max_payout=max_payout,
            commission_rate=settings.COMMISSION_RATE,
        )
        logger.debug(f"Discovery for student {request.user.id}: {len(ranked)} of {len(gigs)} open gigs")
        serializer = GigSerializer(ranked, many=True)
        return Response(serializer.data)
