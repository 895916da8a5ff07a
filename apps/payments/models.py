from django.db import models
from django.conf import settings
from django.db.models import Q
from apps.gigs.models import Gig
from core.constants import (
    TRANSACTION_STATUS_CHOICES, TRANSACTION_STATUS_PENDING, TRANSACTION_SUCCESS_STATUSES,
    PAYMENT_AUDIT_EVENT_CHOICES,
)

class Transaction(models.Model):
    gig = models.ForeignKey(Gig, on_delete=models.CASCADE, related_name='transactions')
    client = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='client_transactions'
    )
    student = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='student_transactions'
    )
    amount = models.DecimalField(max_digits=12, decimal_places=2)  # gross; commission is derived on read
    currency = models.CharField(max_length=3, default='INR')
    status = models.CharField(max_length=50, choices=TRANSACTION_STATUS_CHOICES, default=TRANSACTION_STATUS_PENDING)
    external_reference = models.CharField(max_length=100, unique=True)  # gateway payment id
    external_order_id = models.CharField(max_length=100, null=True, blank=True)
    paid_at = models.DateTimeField(null=True, blank=True)
    payout_processed_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']
        constraints = [
            # Not created on MySQL; on_payment_confirmed only records for a locked gig in progress
            models.UniqueConstraint(
                fields=['gig'],
                condition=Q(status__in=TRANSACTION_SUCCESS_STATUSES),
                name='one_success_transaction_per_gig'
            ),
        ]

    def __str__(self):
        return f"{self.external_reference} - {self.amount} {self.currency} ({self.status})"

    @property
    def commission(self):
        from .engine import commission
        return commission(self.amount)

    @property
    def net_payout(self):
        from .engine import net_payout
        return net_payout(self.amount)

class PaymentAuditLog(models.Model):
    """Payment events that changed nothing or happened outside a confirmation."""
    gig = models.ForeignKey(Gig, on_delete=models.CASCADE, related_name='payment_audit_logs')
    event = models.CharField(max_length=50, choices=PAYMENT_AUDIT_EVENT_CHOICES)
    reference = models.CharField(max_length=100, blank=True, default='')
    details = models.JSONField(default=dict, blank=True)
    timestamp = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-timestamp']

    def __str__(self):
        return f"{self.event} for gig {self.gig_id} at {self.timestamp}"
