from rest_framework import serializers
from .models import ChatThread, ChatMessage, Notification

class NotificationSerializer(serializers.ModelSerializer):
    class Meta:
        model = Notification
        fields = ['id', 'type', 'message', 'gig', 'is_read', 'created_at']
        read_only_fields = ['id', 'type', 'message', 'gig', 'created_at']

class ChatMessageSerializer(serializers.ModelSerializer):
    class Meta:
        model = ChatMessage
        fields = ['id', 'sender', 'text', 'is_system', 'timestamp']

class ChatThreadSerializer(serializers.ModelSerializer):
    class Meta:
        model = ChatThread
        fields = [
            'id', 'participants', 'participant_usernames', 'gig', 'last_message',
            'last_message_timestamp', 'last_message_sender'
        ]
