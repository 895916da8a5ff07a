"""
Payment and commission engine.

A gig is paid once: the client pays the gross budget through the gateway, the
confirmation callback records a single transaction and advances the gig. The
platform commission is never stored; it is derived from the gross amount
whenever it is read.

Two payout models are supported:

* ``direct``: confirmation records a ``succeeded`` transaction and completes the gig.
* ``split``: confirmation records a ``pending_release_to_student`` transaction and
  parks the gig in ``awaiting_payout`` until an admin releases the funds.
"""
import logging
import uuid
from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP
from django.conf import settings
from django.db import IntegrityError, transaction
from django.utils import timezone

from apps.gigs.models import Gig
from apps.gigs.services import lock_gig
from .gateway import RazorpayGateway
from .models import Transaction, PaymentAuditLog
from .signals import payment_confirmed, payout_released
from core.constants import (
    GIG_STATUS_IN_PROGRESS, GIG_STATUS_AWAITING_PAYOUT, GIG_STATUS_COMPLETED,
    TRANSACTION_STATUS_SUCCEEDED, TRANSACTION_STATUS_PENDING_RELEASE, TRANSACTION_STATUS_PAYOUT_SUCCEEDED,
    PAYOUT_MODEL_DIRECT, PAYOUT_MODEL_SPLIT,
)
from core.exceptions import GatewayError, InvalidState, Unauthorized, GigNotFound, TransactionNotFound
from core.utils import atomic_write, dispatch_on_commit

logger = logging.getLogger(__name__)


def commission(amount, rate=None):
    rate = settings.COMMISSION_RATE if rate is None else Decimal(rate)
    return Decimal(amount) * rate


def net_payout(amount, rate=None):
    """What the student receives for a gross ``amount``."""
    rate = settings.COMMISSION_RATE if rate is None else Decimal(rate)
    return Decimal(amount) * (Decimal('1') - rate)


@dataclass(frozen=True)
class PaymentIntent:
    gig_id: int
    order_id: str
    amount: int  # minor units
    currency: str
    key_id: str
    notes: dict = field(default_factory=dict)


class PaymentEngine:

    def __init__(self, gateway=None, commission_rate=None, payout_model=None):
        self.gateway = gateway if gateway is not None else RazorpayGateway()
        self.commission_rate = Decimal(
            settings.COMMISSION_RATE if commission_rate is None else commission_rate
        )
        self.payout_model = payout_model or settings.PAYOUT_MODEL
        if self.payout_model not in (PAYOUT_MODEL_DIRECT, PAYOUT_MODEL_SPLIT):
            raise ValueError(f"Unknown payout model: {self.payout_model}")

    def commission(self, amount):
        return commission(amount, self.commission_rate)

    def net(self, amount):
        return net_payout(amount, self.commission_rate)

    def initiate_payment(self, gig_id, acting_client_id):
        """Create a gateway order for the gig's gross budget."""
        try:
            gig = Gig.objects.get(pk=gig_id)
        except Gig.DoesNotExist:
            raise GigNotFound()
        if gig.client_id != acting_client_id:
            raise Unauthorized("Only the gig's client can pay for it.")
        if gig.status != GIG_STATUS_IN_PROGRESS or gig.selected_student_id is None:
            raise InvalidState("Payment can only be made for a gig in progress with a selected student.")

        amount = int((gig.budget * 100).to_integral_value(rounding=ROUND_HALF_UP))
        notes = {
            'gigId': str(gig.id),
            'clientId': str(gig.client_id),
            'studentId': str(gig.selected_student_id),
        }
        receipt = f"gig-{gig.id}-{uuid.uuid4().hex[:8]}"
        order = self.gateway.create_order(amount, gig.currency, receipt, notes)
        logger.info(f"Payment order {order['id']} created for gig {gig.id} ({amount} {gig.currency} minor units)")
        return PaymentIntent(
            gig_id=gig.id,
            order_id=order['id'],
            amount=amount,
            currency=gig.currency,
            key_id=self.gateway.key_id,
            notes=notes,
        )

    def on_payment_confirmed(self, gig_id, student_id, external_reference, metadata, order_id=None):
        """
        Record a confirmed client payment.

        Returns the recorded transaction, the already-recorded one when the same
        ``external_reference`` is confirmed again, or None when the gig is no
        longer in progress (the callback is audited and ignored).
        """
        metadata = metadata or {}
        with atomic_write('on_payment_confirmed'):
            gig = lock_gig(gig_id)

            existing = Transaction.objects.filter(external_reference=external_reference).first()
            if existing is not None:
                if existing.gig_id != gig.id:
                    logger.warning(
                        f"Payment {external_reference} belongs to gig {existing.gig_id}, "
                        f"not gig {gig.id}; refusing confirmation"
                    )
                    raise Unauthorized("Payment details do not match this gig.")
                logger.info(f"Duplicate confirmation for payment {external_reference}; returning existing transaction")
                return existing

            expected = (str(gig.id), str(gig.client_id), str(gig.selected_student_id))
            received = (
                str(metadata.get('gigId')), str(metadata.get('clientId')), str(metadata.get('studentId'))
            )
            if gig.selected_student_id is None or received != expected or str(student_id) != expected[2]:
                logger.warning(f"Payment {external_reference} metadata {metadata} does not match gig {gig.id}")
                raise Unauthorized("Payment details do not match this gig.")

            if gig.status != GIG_STATUS_IN_PROGRESS:
                logger.warning(f"Ignoring confirmation {external_reference} for gig {gig.id} in status {gig.status}")
                PaymentAuditLog.objects.create(
                    gig=gig,
                    event='confirmation_ignored',
                    reference=external_reference,
                    details={'status': gig.status, 'order_id': order_id},
                )
                return None

            if self.payout_model == PAYOUT_MODEL_SPLIT:
                tx_status, gig_status = TRANSACTION_STATUS_PENDING_RELEASE, GIG_STATUS_AWAITING_PAYOUT
            else:
                tx_status, gig_status = TRANSACTION_STATUS_SUCCEEDED, GIG_STATUS_COMPLETED

            try:
                with transaction.atomic():
                    txn = Transaction.objects.create(
                        gig=gig,
                        client_id=gig.client_id,
                        student_id=gig.selected_student_id,
                        amount=gig.budget,
                        currency=gig.currency,
                        status=tx_status,
                        external_reference=external_reference,
                        external_order_id=order_id,
                        paid_at=timezone.now(),
                    )
            except IntegrityError:
                raise InvalidState("A payment has already been recorded for this gig.")

            gig.transition_to(gig_status)
            gig.save(update_fields=['status', 'updated_at'])
            dispatch_on_commit(payment_confirmed, sender=Transaction, transaction=txn, gig=gig)

        logger.info(f"Payment {external_reference} recorded for gig {gig.id}: transaction {tx_status}, gig {gig_status}")
        return txn

    def on_payment_failed(self, gig_id, error):
        """Audit a failed payment and report it to the caller as a GatewayError."""
        error = error or {}
        code = error.get('code') or 'PAYMENT_FAILED'
        reason = error.get('reason') or error.get('description') or 'Payment failed'
        with atomic_write('on_payment_failed'):
            if not Gig.objects.filter(pk=gig_id).exists():
                raise GigNotFound()
            PaymentAuditLog.objects.create(
                gig_id=gig_id,
                event='payment_failed',
                reference=error.get('payment_id') or '',
                details={'code': code, 'reason': reason},
            )
        logger.warning(f"Payment failed for gig {gig_id}: {code} {reason}")
        raise GatewayError(provider_code=code, reason=reason)

    def release_payout(self, transaction_id, admin):
        """Release held funds to the student and complete the gig."""
        from apps.management.models import ManagementLog

        if not (admin and admin.is_authenticated and admin.is_superuser):
            raise Unauthorized("Only administrators can release payouts.")

        with atomic_write('release_payout'):
            try:
                txn = Transaction.objects.select_for_update().get(pk=transaction_id)
            except Transaction.DoesNotExist:
                raise TransactionNotFound()
            if txn.status != TRANSACTION_STATUS_PENDING_RELEASE:
                raise InvalidState("Only held payments can be released.")
            gig = lock_gig(txn.gig_id)
            gig.transition_to(GIG_STATUS_COMPLETED)
            gig.save(update_fields=['status', 'updated_at'])

            txn.status = TRANSACTION_STATUS_PAYOUT_SUCCEEDED
            txn.payout_processed_at = timezone.now()
            txn.save(update_fields=['status', 'payout_processed_at', 'updated_at'])

            net = self.net(txn.amount)
            PaymentAuditLog.objects.create(
                gig=gig,
                event='payout_released',
                reference=txn.external_reference,
                details={'net_payout': str(net), 'admin_id': admin.id},
            )
            ManagementLog.objects.create(
                admin=admin,
                action='release_payout',
                transaction=txn,
                details=f"Released {net} {txn.currency} to student {txn.student_id} for gig {gig.id} (transaction {txn.id})"
            )
            dispatch_on_commit(payout_released, sender=Transaction, transaction=txn, gig=gig)

        logger.info(f"Admin {admin.id} released payout for transaction {txn.id}")
        return txn


def get_payment_engine():
    return PaymentEngine()
