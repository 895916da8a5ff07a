from django.contrib import admin
from .models import ChatThread, ChatMessage, Notification

@admin.register(ChatThread)
class ChatThreadAdmin(admin.ModelAdmin):
    list_display = ('id', 'gig', 'last_message_timestamp')

@admin.register(ChatMessage)
class ChatMessageAdmin(admin.ModelAdmin):
    list_display = ('thread', 'sender', 'is_system', 'timestamp')
    list_filter = ('is_system',)

@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ('recipient', 'type', 'is_read', 'created_at')
    list_filter = ('type', 'is_read')
