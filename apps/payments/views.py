from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework import status
from rest_framework.permissions import IsAuthenticated, AllowAny
from drf_yasg.utils import swagger_auto_schema
from drf_yasg import openapi
from django.utils.decorators import method_decorator
from django.views.decorators.csrf import csrf_exempt
from dataclasses import asdict
from .engine import get_payment_engine
from .serializers import (
    TransactionSerializer, PaymentIntentSerializer, CheckoutConfirmationSerializer, PaymentFailureSerializer
)
from core.exceptions import GatewayError, InvalidState
from core.utils import IsClient
import json
import logging

logger = logging.getLogger(__name__)

ERROR_SCHEMA = openapi.Schema(
    type=openapi.TYPE_OBJECT,
    properties={
        'error': openapi.Schema(type=openapi.TYPE_STRING),
        'code': openapi.Schema(type=openapi.TYPE_STRING),
        'provider_code': openapi.Schema(type=openapi.TYPE_STRING),
        'reason': openapi.Schema(type=openapi.TYPE_STRING),
        'retry': openapi.Schema(type=openapi.TYPE_BOOLEAN),
    }
)

IGNORED_RESPONSE = openapi.Schema(
    type=openapi.TYPE_OBJECT,
    properties={'message': openapi.Schema(type=openapi.TYPE_STRING)}
)

def confirmation_response(engine, transaction):
    if transaction is None:
        return Response({'message': 'Payment confirmation ignored; the gig is no longer in progress.'})
    return Response(TransactionSerializer(transaction, context={'engine': engine}).data)

class InitiatePaymentView(APIView):
    permission_classes = [IsAuthenticated, IsClient]

    @swagger_auto_schema(
        operation_description="Create a payment order for the gross budget of a gig in progress.",
        responses={201: PaymentIntentSerializer, 403: ERROR_SCHEMA, 404: ERROR_SCHEMA, 409: ERROR_SCHEMA, 502: ERROR_SCHEMA}
    )
    def post(self, request, id):
        engine = get_payment_engine()
        intent = engine.initiate_payment(id, request.user.id)
        return Response(PaymentIntentSerializer(asdict(intent)).data, status=status.HTTP_201_CREATED)

class ConfirmPaymentView(APIView):
    permission_classes = [IsAuthenticated, IsClient]

    @swagger_auto_schema(
        operation_description="Confirm a completed checkout. The signature is verified and the payment "
                              "is fetched from the gateway before it is recorded.",
        request_body=CheckoutConfirmationSerializer,
        responses={
            200: TransactionSerializer,
            400: 'Bad Request',
            401: ERROR_SCHEMA,
            403: ERROR_SCHEMA,
            409: ERROR_SCHEMA,
            502: ERROR_SCHEMA
        }
    )
    def post(self, request, id):
        serializer = CheckoutConfirmationSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        data = serializer.validated_data
        engine = get_payment_engine()

        if not engine.gateway.verify_checkout_signature(
            data['razorpay_order_id'], data['razorpay_payment_id'], data['razorpay_signature']
        ):
            logger.error(f"Invalid checkout signature for gig {id}, payment {data['razorpay_payment_id']}")
            return Response(
                {'error': 'Invalid payment signature', 'code': 'invalid_signature'},
                status=status.HTTP_401_UNAUTHORIZED
            )

        payment = engine.gateway.fetch_payment(data['razorpay_payment_id'])
        if payment.get('status') == 'failed':
            engine.on_payment_failed(id, {
                'code': payment.get('error_code'),
                'reason': payment.get('error_description') or payment.get('error_reason'),
                'payment_id': data['razorpay_payment_id'],
            })
        if payment.get('status') != 'captured':
            logger.warning(f"Payment {data['razorpay_payment_id']} for gig {id} is {payment.get('status')}, not captured")
            raise InvalidState("The payment has not been captured yet.")

        notes = payment.get('notes') or {}
        transaction = engine.on_payment_confirmed(
            id, notes.get('studentId'), data['razorpay_payment_id'], notes, order_id=data['razorpay_order_id']
        )
        return confirmation_response(engine, transaction)

class PaymentFailedView(APIView):
    permission_classes = [IsAuthenticated, IsClient]

    @swagger_auto_schema(
        operation_description="Report a checkout failure. The gig is left unchanged and the failure is "
                              "returned with the provider's code and reason.",
        request_body=PaymentFailureSerializer,
        responses={400: 'Bad Request', 404: ERROR_SCHEMA, 502: ERROR_SCHEMA}
    )
    def post(self, request, id):
        serializer = PaymentFailureSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        # Always raises GatewayError, rendered as 502 with the provider code and reason
        get_payment_engine().on_payment_failed(id, serializer.validated_data)

@method_decorator(csrf_exempt, name='dispatch')
class PaymentWebhookView(APIView):
    permission_classes = [AllowAny]
    authentication_classes = []

    @swagger_auto_schema(
        operation_description="Razorpay webhook for payment.captured and payment.failed events. "
                              "Requests must carry a valid X-Razorpay-Signature header.",
        responses={200: IGNORED_RESPONSE, 400: 'Bad Request', 401: 'Invalid signature'}
    )
    def post(self, request):
        engine = get_payment_engine()
        signature = request.headers.get('X-Razorpay-Signature')
        if not engine.gateway.verify_webhook_signature(request.body, signature):
            logger.error('Invalid webhook signature')
            return Response({'error': 'Invalid webhook signature', 'code': 'invalid_signature'}, status=status.HTTP_401_UNAUTHORIZED)

        try:
            payload = json.loads(request.body)
        except ValueError:
            return Response({'error': 'Malformed payload', 'code': 'invalid_input'}, status=status.HTTP_400_BAD_REQUEST)

        event = payload.get('event')
        entity = ((payload.get('payload') or {}).get('payment') or {}).get('entity') or {}
        notes = entity.get('notes') or {}
        gig_id = notes.get('gigId')
        logger.debug(f"Received webhook {event} for payment {entity.get('id')}")

        if event not in ('payment.captured', 'payment.failed'):
            return Response({'message': f"Event {event} ignored"})
        if not gig_id or not str(gig_id).isdigit():
            logger.error(f"Webhook {event} for payment {entity.get('id')} has no gig reference")
            return Response({'error': 'Missing gig reference', 'code': 'invalid_input'}, status=status.HTTP_400_BAD_REQUEST)

        if event == 'payment.failed':
            try:
                engine.on_payment_failed(int(gig_id), {
                    'code': entity.get('error_code'),
                    'reason': entity.get('error_description') or entity.get('error_reason'),
                    'payment_id': entity.get('id'),
                })
            except GatewayError as e:
                # The failure is recorded; the provider only needs an acknowledgement
                return Response({'message': 'Payment failure recorded', 'provider_code': e.provider_code})

        transaction = engine.on_payment_confirmed(
            int(gig_id), notes.get('studentId'), entity.get('id'), notes, order_id=entity.get('order_id')
        )
        return confirmation_response(engine, transaction)
