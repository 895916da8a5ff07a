"""
Gig lifecycle services.

ApplicantManager owns the applicant list of a gig (apply, decide, invite, close);
ReviewAggregator owns post-completion reviews and the student's running rating.

Every mutating operation locks the gig row for the duration of its transaction,
so concurrent decisions on the same gig are serialized. Side effects
(notifications) are dispatched only after the transaction commits.
"""
import logging
from django.db import IntegrityError, transaction
from django.utils import timezone

from apps.gigs.models import Gig, Applicant, GigRequest, Review
from apps.gigs.signals import applicant_decided, review_submitted
from apps.users.models import Student
from core.constants import (
    GIG_STATUS_OPEN, GIG_STATUS_IN_PROGRESS, GIG_STATUS_CLOSED, GIG_STATUS_COMPLETED,
    APPLICANT_STATUS_ACCEPTED, APPLICANT_DECISIONS,
)
from core.exceptions import (
    Unauthorized, InvalidState, GigNotOpen, AlreadyApplied, AlreadyDecided, AlreadyReviewed,
    AlreadyInvited, InvalidInput, InvalidRating, GigNotFound, ApplicantNotFound, ReviewNotFound, NotFound,
)
from core.utils import atomic_write, dispatch_on_commit

logger = logging.getLogger(__name__)


def lock_gig(gig_id):
    """Fetch a gig with a row lock; must be called inside a transaction."""
    try:
        return Gig.objects.select_for_update().get(pk=gig_id)
    except Gig.DoesNotExist:
        raise GigNotFound()


class ApplicantManager:

    @staticmethod
    def apply(gig_id, student_id, student_username, message=None):
        """Append a pending application for ``student_id`` to an open gig."""
        with atomic_write('apply'):
            gig = lock_gig(gig_id)
            if gig.client_id == student_id:
                raise Unauthorized("You cannot apply to your own gig.")
            if gig.applicants.filter(student_id=student_id).exists():
                raise AlreadyApplied()
            if gig.status != GIG_STATUS_OPEN:
                raise GigNotOpen()
            try:
                with transaction.atomic():
                    applicant = Applicant.objects.create(
                        gig=gig,
                        student_id=student_id,
                        student_username=student_username,
                        message=(message or '').strip() or None,
                    )
            except IntegrityError:
                raise AlreadyApplied()

        logger.info(f"Student {student_id} applied to gig {gig_id}")
        return applicant

    @staticmethod
    def decide(gig_id, student_id, decision, acting_client_id):
        """
        Accept or reject a pending applicant.

        Decisions are final: deciding on an applicant that is no longer pending
        fails with AlreadyDecided whatever the new decision is. Accepting moves
        the gig to in_progress and records the selected student.
        """
        if decision not in APPLICANT_DECISIONS:
            raise InvalidInput("Decision must be 'accepted' or 'rejected'.")

        with atomic_write('decide'):
            gig = lock_gig(gig_id)
            if gig.client_id != acting_client_id:
                raise Unauthorized("Only the gig's client can decide on applicants.")
            applicant = gig.applicants.filter(student_id=student_id).first()
            if applicant is None:
                raise ApplicantNotFound()
            if applicant.is_decided:
                raise AlreadyDecided()

            if decision == APPLICANT_STATUS_ACCEPTED:
                if gig.selected_student_id is not None:
                    raise InvalidState("This gig already has a selected student.")
                gig.transition_to(GIG_STATUS_IN_PROGRESS)
                gig.selected_student_id = student_id
                gig.save(update_fields=['status', 'selected_student', 'updated_at'])

            applicant.status = decision
            applicant.decided_at = timezone.now()
            applicant.save(update_fields=['status', 'decided_at'])

            dispatch_on_commit(
                applicant_decided, sender=Gig,
                gig=gig, applicant=applicant, decision=decision, acting_client_id=acting_client_id,
            )

        logger.info(f"Client {acting_client_id} {decision} student {student_id} on gig {gig_id}")
        return gig

    @staticmethod
    def close_gig(gig_id, acting_client_id):
        with atomic_write('close_gig'):
            gig = lock_gig(gig_id)
            if gig.client_id != acting_client_id:
                raise Unauthorized("Only the gig's client can close it.")
            gig.transition_to(GIG_STATUS_CLOSED)
            gig.save(update_fields=['status', 'updated_at'])
        logger.info(f"Gig {gig_id} closed by client {acting_client_id}")
        return gig

    @staticmethod
    def invite(gig_id, student_id, acting_client_id):
        """Record a client's request for a specific student to take an open gig."""
        with atomic_write('invite'):
            gig = lock_gig(gig_id)
            if gig.client_id != acting_client_id:
                raise Unauthorized("Only the gig's client can send requests.")
            if gig.status != GIG_STATUS_OPEN:
                raise GigNotOpen()
            if not Student.objects.filter(user_id=student_id).exists():
                raise NotFound("Student not found.")
            if GigRequest.objects.filter(gig=gig, student_id=student_id).exists():
                raise AlreadyInvited()
            gig_request = GigRequest.objects.create(gig=gig, student_id=student_id)
        logger.info(f"Client {acting_client_id} invited student {student_id} to gig {gig_id}")
        return gig_request


class ReviewAggregator:

    @staticmethod
    def submit_review(gig_id, client_id, rating, comment=None):
        """
        Create the single review for a completed gig and fold the rating into
        the student's running average.

        The student profile row is locked while the average is recomputed, so
        concurrent reviews of the same student from different gigs do not lose
        updates.
        """
        if isinstance(rating, bool) or not isinstance(rating, int) or not 1 <= rating <= 5:
            raise InvalidRating()

        with atomic_write('submit_review'):
            gig = lock_gig(gig_id)
            if gig.client_id != client_id:
                raise Unauthorized("Only the gig's client can review the student.")
            if gig.status != GIG_STATUS_COMPLETED or gig.selected_student_id is None:
                raise InvalidState("Reviews can only be submitted for completed gigs.")
            student_id = gig.selected_student_id
            if Review.objects.filter(gig=gig, client_id=client_id, student_id=student_id).exists():
                raise AlreadyReviewed()
            try:
                with transaction.atomic():
                    review = Review.objects.create(
                        gig=gig,
                        client_id=client_id,
                        student_id=student_id,
                        rating=rating,
                        comment=(comment or '').strip(),
                    )
            except IntegrityError:
                raise AlreadyReviewed()

            profile = Student.objects.select_for_update().filter(user_id=student_id).first()
            if profile is None:
                logger.warning(f"No student profile for user {student_id}; rating not aggregated")
            else:
                old_count = profile.total_ratings
                profile.average_rating = (profile.average_rating * old_count + rating) / (old_count + 1)
                profile.total_ratings = old_count + 1
                profile.save(update_fields=['average_rating', 'total_ratings'])

            dispatch_on_commit(review_submitted, sender=Review, review=review)

        logger.info(f"Client {client_id} rated student {student_id} {rating}/5 on gig {gig_id}")
        return review

    @staticmethod
    def reply_to_review(review_id, student_id, text):
        """Set or overwrite the reviewed student's reply."""
        text = (text or '').strip()
        if not text:
            raise InvalidInput("Reply text cannot be empty.")

        with atomic_write('reply_to_review'):
            try:
                review = Review.objects.select_for_update().get(pk=review_id)
            except Review.DoesNotExist:
                raise ReviewNotFound()
            if review.student_id != student_id:
                raise Unauthorized("Only the reviewed student can reply.")
            review.student_reply_text = text
            review.student_replied_at = timezone.now()
            review.save(update_fields=['student_reply_text', 'student_replied_at'])
        return review
