from django.db import models
from django.conf import settings
from core.constants import NOTIFICATION_TYPE_CHOICES

class ChatThread(models.Model):
    """Direct conversation between two users; the id is derived from the pair."""
    id = models.CharField(max_length=64, primary_key=True)
    participants = models.JSONField(default=list)
    participant_usernames = models.JSONField(default=dict)
    gig = models.ForeignKey('gigs.Gig', on_delete=models.SET_NULL, null=True, blank=True, related_name='chat_threads')
    last_message = models.TextField(blank=True, default='')
    last_message_timestamp = models.DateTimeField(null=True, blank=True)
    last_message_sender = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='+'
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-last_message_timestamp']

    def __str__(self):
        return f"Chat {self.id}"

    def has_participant(self, user_id):
        return str(user_id) in [str(p) for p in self.participants]

class ChatMessage(models.Model):
    thread = models.ForeignKey(ChatThread, on_delete=models.CASCADE, related_name='messages')
    sender = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True)
    text = models.TextField()
    is_system = models.BooleanField(default=False)
    timestamp = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['timestamp', 'id']

    def __str__(self):
        return f"{self.thread_id}: {self.text[:40]}"

class Notification(models.Model):
    recipient = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='notifications')
    type = models.CharField(max_length=50, choices=NOTIFICATION_TYPE_CHOICES)
    message = models.TextField()
    gig = models.ForeignKey('gigs.Gig', on_delete=models.SET_NULL, null=True, blank=True, related_name='+')
    is_read = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return f"Notification to {self.recipient.username} - {self.type}"
