from django.urls import path
from .views import InitiatePaymentView, ConfirmPaymentView, PaymentFailedView, PaymentWebhookView

urlpatterns = [
    path('payments/gigs/<int:id>/initiate/', InitiatePaymentView.as_view(), name='payment_initiate'),
    path('payments/gigs/<int:id>/confirm/', ConfirmPaymentView.as_view(), name='payment_confirm'),
    path('payments/gigs/<int:id>/failed/', PaymentFailedView.as_view(), name='payment_failed'),
    path('payments/webhook/', PaymentWebhookView.as_view(), name='payment_webhook'),
]
