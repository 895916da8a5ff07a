from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from drf_yasg.utils import swagger_auto_schema
from drf_yasg import openapi
from django.db.models import Sum
from apps.payments.engine import get_payment_engine
from apps.payments.models import Transaction
from core.constants import TRANSACTION_STATUS_CHOICES, TRANSACTION_SUCCESS_STATUSES
from .models import ManagementLog
from .permissions import IsSuperuser
from .serializers import AdminTransactionSerializer, ManagementLogSerializer
from decimal import Decimal
import logging

logger = logging.getLogger(__name__)

class AdminTransactionListView(APIView):
    permission_classes = [IsAuthenticated, IsSuperuser]

    @swagger_auto_schema(
        operation_description="All transactions with derived commission and net payout, plus platform totals "
                              "over client-paid transactions.",
        manual_parameters=[
            openapi.Parameter('status', openapi.IN_QUERY, type=openapi.TYPE_STRING,
                              enum=[choice[0] for choice in TRANSACTION_STATUS_CHOICES]),
        ],
        responses={
            200: openapi.Response(
                description='Transactions and totals',
                schema=openapi.Schema(
                    type=openapi.TYPE_OBJECT,
                    properties={
                        'totals': openapi.Schema(
                            type=openapi.TYPE_OBJECT,
                            properties={
                                'gross_volume': openapi.Schema(type=openapi.TYPE_STRING),
                                'commission_earned': openapi.Schema(type=openapi.TYPE_STRING),
                                'count': openapi.Schema(type=openapi.TYPE_INTEGER),
                            }
                        ),
                        'transactions': openapi.Schema(type=openapi.TYPE_ARRAY, items=openapi.Schema(type=openapi.TYPE_OBJECT)),
                    }
                )
            ),
            401: 'Unauthorized',
            403: 'Forbidden'
        }
    )
    def get(self, request):
        engine = get_payment_engine()
        transactions = Transaction.objects.select_related('gig', 'client', 'student')
        status_filter = request.query_params.get('status')
        if status_filter:
            transactions = transactions.filter(status=status_filter)

        paid = Transaction.objects.filter(status__in=TRANSACTION_SUCCESS_STATUSES)
        gross = paid.aggregate(total=Sum('amount'))['total'] or Decimal('0')
        return Response({
            'totals': {
                'gross_volume': str(gross),
                'commission_earned': str(engine.commission(gross)),
                'count': paid.count(),
            },
            'transactions': AdminTransactionSerializer(transactions, many=True, context={'engine': engine}).data,
        })

class ReleasePayoutView(APIView):
    permission_classes = [IsAuthenticated, IsSuperuser]

    @swagger_auto_schema(
        operation_description="Release held funds to the student and complete the gig (split payout model).",
        responses={200: AdminTransactionSerializer, 403: 'Forbidden', 404: 'Not Found', 409: 'Conflict'}
    )
    def post(self, request, transaction_id):
        engine = get_payment_engine()
        transaction = engine.release_payout(transaction_id, request.user)
        return Response(AdminTransactionSerializer(transaction, context={'engine': engine}).data, status=status.HTTP_200_OK)

class ManagementLogListView(APIView):
    permission_classes = [IsAuthenticated, IsSuperuser]

    @swagger_auto_schema(
        operation_description="Audit trail of admin actions, newest first.",
        responses={200: ManagementLogSerializer(many=True), 401: 'Unauthorized', 403: 'Forbidden'}
    )
    def get(self, request):
        logs = ManagementLog.objects.select_related('admin')
        return Response(ManagementLogSerializer(logs, many=True).data)
