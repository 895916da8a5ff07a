from django.conf import settings
from django.core.mail import send_mail
from django.db import transaction
from twilio.base.exceptions import TwilioRestException
from twilio.http.http_client import TwilioHttpClient
from twilio.rest import Client as TwilioClient
from .models import ChatThread, ChatMessage, Notification
from .tasks import deliver_notification
from core.utils import get_chat_id
import logging
import re

logger = logging.getLogger(__name__)

def send_notification(user, subject, email_message, sms_message):
    """
    Push a gig event to a user's inbox and phone.

    Email goes out whenever the user has an address. SMS needs an E.164
    number and a configured Twilio account. Delivery failures are logged and
    never raised.
    """
    if user.email:
        try:
            send_mail(
                subject=subject,
                message=email_message,
                from_email=settings.DEFAULT_FROM_EMAIL,
                recipient_list=[user.email],
                fail_silently=False,
            )
            logger.info(f"Email notification sent to {user.email}")
        except Exception as e:
            logger.error(f"Failed to send email to {user.email}: {str(e)}")

    if not user.phone_number:
        return
    if not re.match(r'^\+\d{9,15}$', user.phone_number):
        logger.warning(f"Invalid phone number format for user {user.id}: {user.phone_number}")
        return
    if not settings.TWILIO_ACCOUNT_SID:
        logger.debug(f"Twilio not configured; skipping SMS to user {user.id}")
        return
    try:
        twilio_client = TwilioClient(
            settings.TWILIO_ACCOUNT_SID, settings.TWILIO_AUTH_TOKEN,
            http_client=TwilioHttpClient(timeout=settings.TWILIO_TIMEOUT)
        )
        twilio_client.messages.create(
            body=sms_message,
            from_=settings.TWILIO_PHONE_NUMBER,
            to=user.phone_number
        )
        logger.info(f"SMS notification sent to {user.phone_number}")
    except TwilioRestException as e:
        logger.error(f"Failed to send SMS to {user.phone_number}: {str(e)}")

def notify(recipient, notification_type, message, gig=None, subject=None):
    """Record an in-app notification and queue its email/SMS push."""
    notification = Notification.objects.create(
        recipient=recipient, type=notification_type, message=message, gig=gig
    )
    try:
        deliver_notification.delay(
            recipient.id,
            subject or 'HustleUp notification',
            f"Hi {recipient.display_name},\n\n{message}\n\nHustleUp Team",
            message,
        )
    except Exception as e:
        # Broker outage: the in-app notification above still stands
        logger.error(f"Failed to queue delivery of notification {notification.id}: {str(e)}")
    return notification

def post_system_message(gig, client, student, text):
    """
    Append a system message to the client/student thread, creating the thread
    on first contact, and refresh the thread's last-message fields.
    """
    thread_id = get_chat_id(client.id, student.id)
    with transaction.atomic():
        thread, created = ChatThread.objects.select_for_update().get_or_create(
            id=thread_id,
            defaults={
                'participants': sorted([str(client.id), str(student.id)]),
                'participant_usernames': {
                    str(client.id): client.display_name,
                    str(student.id): student.display_name,
                },
                'gig': gig,
            }
        )
        message = ChatMessage.objects.create(thread=thread, sender=client, text=text, is_system=True)
        thread.last_message = text
        thread.last_message_timestamp = message.timestamp
        thread.last_message_sender = client
        thread.gig = gig
        thread.save(update_fields=['last_message', 'last_message_timestamp', 'last_message_sender', 'gig'])
    if created:
        logger.info(f"Chat thread {thread_id} created for gig {gig.id}")
    return message
