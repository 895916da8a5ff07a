from rest_framework import serializers
from apps.users.serializers import UserSerializer
from apps.payments.serializers import TransactionSerializer
from .models import ManagementLog

class AdminTransactionSerializer(TransactionSerializer):
    client = UserSerializer(read_only=True)
    student = UserSerializer(read_only=True)

    class Meta(TransactionSerializer.Meta):
        ref_name = 'AdminTransaction'

class ManagementLogSerializer(serializers.ModelSerializer):
    admin = UserSerializer(read_only=True)

    class Meta:
        model = ManagementLog
        fields = ['id', 'admin', 'action', 'transaction', 'details', 'timestamp']
        read_only_fields = fields
