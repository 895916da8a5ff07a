from rest_framework import serializers
from .models import Transaction

class TransactionSerializer(serializers.ModelSerializer):
    commission = serializers.SerializerMethodField()
    net_payout = serializers.SerializerMethodField()
    gig_title = serializers.ReadOnlyField(source='gig.title')

    class Meta:
        model = Transaction
        fields = [
            'id', 'gig', 'gig_title', 'client', 'student', 'amount', 'commission', 'net_payout',
            'currency', 'status', 'external_reference', 'external_order_id', 'paid_at',
            'payout_processed_at', 'created_at'
        ]
        read_only_fields = fields

    def get_commission(self, obj):
        engine = self.context.get('engine')
        return str(engine.commission(obj.amount) if engine else obj.commission)

    def get_net_payout(self, obj):
        engine = self.context.get('engine')
        return str(engine.net(obj.amount) if engine else obj.net_payout)

class PaymentIntentSerializer(serializers.Serializer):
    gig_id = serializers.IntegerField()
    order_id = serializers.CharField()
    amount = serializers.IntegerField(help_text='Amount in minor units (paise)')
    currency = serializers.CharField()
    key_id = serializers.CharField()
    notes = serializers.DictField(child=serializers.CharField())

class CheckoutConfirmationSerializer(serializers.Serializer):
    razorpay_order_id = serializers.CharField()
    razorpay_payment_id = serializers.CharField()
    razorpay_signature = serializers.CharField()

class PaymentFailureSerializer(serializers.Serializer):
    code = serializers.CharField(required=False, allow_blank=True)
    description = serializers.CharField(required=False, allow_blank=True)
    reason = serializers.CharField(required=False, allow_blank=True)
    payment_id = serializers.CharField(required=False, allow_blank=True)

