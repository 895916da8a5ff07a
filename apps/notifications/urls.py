from django.urls import path
from .views import NotificationListView, NotificationMarkReadView, ChatMessagesView

urlpatterns = [
    path('notifications/', NotificationListView.as_view(), name='notification_list'),
    path('notifications/<int:notification_id>/read/', NotificationMarkReadView.as_view(), name='notification_read'),
    path('notifications/chats/<str:thread_id>/messages/', ChatMessagesView.as_view(), name='chat_messages'),
]
