from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from drf_yasg.utils import swagger_auto_schema
from drf_yasg import openapi
from .models import ChatThread, Notification
from .serializers import NotificationSerializer, ChatMessageSerializer, ChatThreadSerializer
import logging

logger = logging.getLogger(__name__)

class NotificationListView(APIView):
    permission_classes = [IsAuthenticated]

    @swagger_auto_schema(
        operation_description="List the authenticated user's notifications, newest first.",
        manual_parameters=[
            openapi.Parameter('unread', openapi.IN_QUERY, type=openapi.TYPE_BOOLEAN, description='Only unread notifications'),
        ],
        responses={200: NotificationSerializer(many=True), 401: 'Unauthorized'}
    )
    def get(self, request):
        notifications = Notification.objects.filter(recipient=request.user)
        if request.query_params.get('unread') in ('true', '1'):
            notifications = notifications.filter(is_read=False)
        serializer = NotificationSerializer(notifications, many=True)
        return Response(serializer.data)

class NotificationMarkReadView(APIView):
    permission_classes = [IsAuthenticated]

    @swagger_auto_schema(
        operation_description="Mark one of the authenticated user's notifications as read.",
        responses={200: NotificationSerializer, 404: 'Not Found'}
    )
    def post(self, request, notification_id):
        updated = Notification.objects.filter(pk=notification_id, recipient=request.user).update(is_read=True)
        if not updated:
            return Response({"error": "Notification not found", "code": "not_found"}, status=status.HTTP_404_NOT_FOUND)
        return Response(NotificationSerializer(Notification.objects.get(pk=notification_id)).data)

class ChatMessagesView(APIView):
    permission_classes = [IsAuthenticated]

    @swagger_auto_schema(
        operation_description="Messages of a chat thread; only its two participants may read it.",
        responses={
            200: openapi.Response(
                description='Thread and messages',
                schema=openapi.Schema(
                    type=openapi.TYPE_OBJECT,
                    properties={
                        'thread': openapi.Schema(type=openapi.TYPE_OBJECT),
                        'messages': openapi.Schema(type=openapi.TYPE_ARRAY, items=openapi.Schema(type=openapi.TYPE_OBJECT)),
                    }
                )
            ),
            403: 'Forbidden',
            404: 'Not Found'
        }
    )
    def get(self, request, thread_id):
        try:
            thread = ChatThread.objects.get(pk=thread_id)
        except ChatThread.DoesNotExist:
            return Response({"error": "Chat not found", "code": "not_found"}, status=status.HTTP_404_NOT_FOUND)
        if not thread.has_participant(request.user.id):
            logger.warning(f"User {request.user.id} denied access to chat {thread_id}")
            return Response({"error": "Not a participant of this chat", "code": "unauthorized"}, status=status.HTTP_403_FORBIDDEN)
        return Response({
            'thread': ChatThreadSerializer(thread).data,
            'messages': ChatMessageSerializer(thread.messages.all(), many=True).data,
        })
