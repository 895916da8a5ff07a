from django.urls import path
from .views import AdminTransactionListView, ReleasePayoutView, ManagementLogListView

urlpatterns = [
    path('management/transactions/', AdminTransactionListView.as_view(), name='admin_transactions'),
    path('management/transactions/<int:transaction_id>/release/', ReleasePayoutView.as_view(), name='admin_release_payout'),
    path('management/logs/', ManagementLogListView.as_view(), name='management_logs'),
]
