"""
Celery tasks for notification delivery.

Gig events record their in-app notification synchronously; the email and SMS
push is queued here and runs on a worker.
"""

import logging
from celery import shared_task
from django.contrib.auth import get_user_model
from django.db import DatabaseError

logger = logging.getLogger(__name__)


@shared_task(
    bind=True,
    name='notifications.tasks.deliver_notification',
    max_retries=3,
    default_retry_delay=60,
    ignore_result=True,
)
def deliver_notification(self, user_id, subject, email_message, sms_message):
    """Email and text a user about a gig event."""
    from .utils import send_notification

    User = get_user_model()
    try:
        user = User.objects.get(pk=user_id)
    except User.DoesNotExist:
        logger.warning(f"User {user_id} no longer exists; dropping notification '{subject}'")
        return
    except DatabaseError as e:
        logger.error(f"Could not load user {user_id} for delivery: {str(e)}")
        raise self.retry(exc=e)

    send_notification(user, subject, email_message, sms_message)
