from django.dispatch import receiver
from apps.gigs.signals import applicant_decided, review_submitted
from apps.payments.signals import payment_confirmed, payout_released
from apps.payments.engine import net_payout
from core.constants import TRANSACTION_STATUS_PENDING_RELEASE
from .utils import notify, post_system_message
from decimal import Decimal
import logging

logger = logging.getLogger(__name__)

CENTS = Decimal('0.01')

# Receivers run after the triggering transaction has committed. A failure here
# is logged and never reaches the operation that caused it.

@receiver(applicant_decided)
def notify_applicant_decision(sender, gig, applicant, decision, **kwargs):
    """Tell the student about the client's decision, in-app and in their chat with the client."""
    try:
        message = f'Your application for the gig "{gig.title}" has been {decision}.'
        student = applicant.student
        notify(student, 'application_status_update', message, gig=gig, subject=f"Application {decision}: {gig.title}")
        post_system_message(gig, gig.client, student, message)
        logger.info(f"Notified student {student.id} of {decision} decision on gig {gig.id}")
    except Exception as e:
        logger.error(f"Error notifying decision on gig {gig.id} for student {applicant.student_id}: {str(e)}")

@receiver(payment_confirmed)
def notify_payment_confirmed(sender, transaction, gig, **kwargs):
    try:
        net = net_payout(transaction.amount).quantize(CENTS)
        if transaction.status == TRANSACTION_STATUS_PENDING_RELEASE:
            message = (
                f'The client has paid {transaction.amount} {transaction.currency} for "{gig.title}". '
                f'Your payout of {net} {transaction.currency} will be released shortly.'
            )
        else:
            message = (
                f'Payment for "{gig.title}" is complete. '
                f'You will receive {net} {transaction.currency}.'
            )
        notify(transaction.student, 'payment_processed', message, gig=gig, subject=f"Payment received: {gig.title}")
        post_system_message(gig, gig.client, transaction.student, message)
    except Exception as e:
        logger.error(f"Error notifying payment {transaction.external_reference} for gig {gig.id}: {str(e)}")

@receiver(payout_released)
def notify_payout_released(sender, transaction, gig, **kwargs):
    try:
        net = net_payout(transaction.amount).quantize(CENTS)
        message = f'Your payout of {net} {transaction.currency} for "{gig.title}" has been released.'
        notify(transaction.student, 'payment_released', message, gig=gig, subject=f"Payout released: {gig.title}")
        post_system_message(gig, gig.client, transaction.student, message)
    except Exception as e:
        logger.error(f"Error notifying payout for transaction {transaction.id}: {str(e)}")

@receiver(review_submitted)
def notify_review_received(sender, review, **kwargs):
    try:
        message = f'{review.client.display_name} rated your work on "{review.gig.title}" {review.rating}/5.'
        notify(review.student, 'review_received', message, gig=review.gig, subject=f"New review: {review.gig.title}")
    except Exception as e:
        logger.error(f"Error notifying review {review.id}: {str(e)}")
