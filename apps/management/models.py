from django.db import models
from django.conf import settings
from core.constants import MANAGEMENT_ACTION_CHOICES

class ManagementLog(models.Model):
    """Audit trail of administrator actions on payments."""
    admin = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.PROTECT, related_name='management_logs')
    action = models.CharField(max_length=50, choices=MANAGEMENT_ACTION_CHOICES)
    transaction = models.ForeignKey(
        'payments.Transaction', on_delete=models.SET_NULL, null=True, blank=True, related_name='management_logs'
    )
    details = models.TextField(blank=True, default='')
    timestamp = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-timestamp', '-id']

    def __str__(self):
        return f"{self.get_action_display()} by admin {self.admin_id} ({self.timestamp:%Y-%m-%d %H:%M})"
