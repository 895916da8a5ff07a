from django.contrib import admin
from .models import Transaction, PaymentAuditLog

@admin.register(Transaction)
class TransactionAdmin(admin.ModelAdmin):
    list_display = ('external_reference', 'gig', 'client', 'student', 'amount', 'currency', 'status', 'paid_at')
    list_filter = ('status', 'currency')
    search_fields = ('external_reference', 'external_order_id', 'gig__title')
    readonly_fields = ('amount', 'external_reference', 'paid_at', 'payout_processed_at')

@admin.register(PaymentAuditLog)
class PaymentAuditLogAdmin(admin.ModelAdmin):
    list_display = ('gig', 'event', 'reference', 'timestamp')
    list_filter = ('event',)
