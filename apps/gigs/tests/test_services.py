"""
Gig lifecycle service tests: applying, deciding, closing and inviting.
"""

from unittest.mock import patch

import pytest
from django.db import DatabaseError

from apps.gigs.models import Applicant, GigRequest
from apps.gigs.services import ApplicantManager
from apps.notifications.models import Notification
from core.exceptions import (
    AlreadyApplied, AlreadyDecided, AlreadyInvited, ApplicantNotFound, GigNotFound, GigNotOpen,
    InvalidInput, InvalidState, NotFound, PersistenceError, Unauthorized,
)


# ============================================================================
# APPLY
# ============================================================================

@pytest.mark.django_db
class TestApply:

    def test_apply_appends_pending_entry(self, open_gig, student_user):
        applicant = ApplicantManager.apply(open_gig.id, student_user.id, student_user.username, 'Pick me')

        assert applicant.status == 'pending'
        assert applicant.student_username == student_user.username
        assert applicant.message == 'Pick me'
        assert applicant.applied_at is not None
        assert list(open_gig.applicants.values_list('student_id', flat=True)) == [student_user.id]

    def test_blank_message_is_stored_as_none(self, open_gig, student_user):
        applicant = ApplicantManager.apply(open_gig.id, student_user.id, student_user.username, '   ')
        assert applicant.message is None

    def test_second_application_fails(self, open_gig, student_user):
        ApplicantManager.apply(open_gig.id, student_user.id, student_user.username)

        with pytest.raises(AlreadyApplied):
            ApplicantManager.apply(open_gig.id, student_user.id, student_user.username)
        assert open_gig.applicants.count() == 1

    def test_apply_to_gig_that_is_not_open(self, in_progress_gig, other_student_user):
        with pytest.raises(GigNotOpen) as exc_info:
            ApplicantManager.apply(in_progress_gig.id, other_student_user.id, other_student_user.username)

        assert isinstance(exc_info.value, InvalidState)
        assert not Applicant.objects.filter(student=other_student_user).exists()

    def test_existing_entry_reported_before_gig_state(self, in_progress_gig, student_user):
        with pytest.raises(AlreadyApplied):
            ApplicantManager.apply(in_progress_gig.id, student_user.id, student_user.username)

    def test_client_cannot_apply_to_own_gig(self, open_gig, client_user):
        with pytest.raises(Unauthorized):
            ApplicantManager.apply(open_gig.id, client_user.id, client_user.username)

    def test_unknown_gig(self, student_user):
        with pytest.raises(GigNotFound):
            ApplicantManager.apply(987654, student_user.id, student_user.username)

    def test_database_failure_is_reported_without_partial_write(self, open_gig, student_user):
        with patch('apps.gigs.services.Applicant.objects.create', side_effect=DatabaseError('disk full')):
            with pytest.raises(PersistenceError):
                ApplicantManager.apply(open_gig.id, student_user.id, student_user.username)

        open_gig.refresh_from_db()
        assert open_gig.status == 'open'
        assert not Applicant.objects.filter(gig=open_gig).exists()


# ============================================================================
# DECIDE
# ============================================================================

@pytest.mark.django_db
class TestDecide:

    def test_accept_selects_student_and_starts_gig(self, open_gig, client_user, student_user):
        ApplicantManager.apply(open_gig.id, student_user.id, student_user.username)

        gig = ApplicantManager.decide(open_gig.id, student_user.id, 'accepted', client_user.id)

        gig.refresh_from_db()
        applicant = gig.applicants.get(student=student_user)
        assert gig.status == 'in_progress'
        assert gig.selected_student_id == student_user.id
        assert applicant.status == 'accepted'
        assert applicant.decided_at is not None

    def test_reject_leaves_gig_open(self, open_gig, client_user, student_user):
        ApplicantManager.apply(open_gig.id, student_user.id, student_user.username)

        gig = ApplicantManager.decide(open_gig.id, student_user.id, 'rejected', client_user.id)

        gig.refresh_from_db()
        assert gig.status == 'open'
        assert gig.selected_student is None
        assert gig.applicants.get(student=student_user).status == 'rejected'

    def test_only_one_applicant_can_be_accepted(self, open_gig, client_user, student_user, other_student_user):
        ApplicantManager.apply(open_gig.id, student_user.id, student_user.username)
        ApplicantManager.apply(open_gig.id, other_student_user.id, other_student_user.username)
        ApplicantManager.decide(open_gig.id, student_user.id, 'accepted', client_user.id)

        with pytest.raises(InvalidState):
            ApplicantManager.decide(open_gig.id, other_student_user.id, 'accepted', client_user.id)

        open_gig.refresh_from_db()
        assert open_gig.selected_student_id == student_user.id
        assert open_gig.applicants.filter(status='accepted').count() == 1
        assert open_gig.applicants.get(student=other_student_user).status == 'pending'

    @pytest.mark.parametrize('first,second', [
        ('accepted', 'accepted'),
        ('accepted', 'rejected'),
        ('rejected', 'rejected'),
        ('rejected', 'accepted'),
    ])
    def test_decisions_are_final(self, open_gig, client_user, student_user, first, second):
        ApplicantManager.apply(open_gig.id, student_user.id, student_user.username)
        ApplicantManager.decide(open_gig.id, student_user.id, first, client_user.id)

        with pytest.raises(AlreadyDecided):
            ApplicantManager.decide(open_gig.id, student_user.id, second, client_user.id)
        assert open_gig.applicants.get(student=student_user).status == first

    def test_non_owner_cannot_decide(self, open_gig, student_user, client_factory):
        intruder = client_factory().user
        ApplicantManager.apply(open_gig.id, student_user.id, student_user.username)

        with pytest.raises(Unauthorized):
            ApplicantManager.decide(open_gig.id, student_user.id, 'accepted', intruder.id)

        open_gig.refresh_from_db()
        assert open_gig.status == 'open'
        assert open_gig.applicants.get(student=student_user).status == 'pending'

    def test_unknown_applicant(self, open_gig, client_user, student_user):
        with pytest.raises(ApplicantNotFound) as exc_info:
            ApplicantManager.decide(open_gig.id, student_user.id, 'accepted', client_user.id)
        assert isinstance(exc_info.value, NotFound)

    def test_unknown_decision(self, open_gig, client_user, student_user):
        ApplicantManager.apply(open_gig.id, student_user.id, student_user.username)
        with pytest.raises(InvalidInput):
            ApplicantManager.decide(open_gig.id, student_user.id, 'maybe', client_user.id)

    def test_failed_applicant_write_rolls_back_gig(self, open_gig, client_user, student_user):
        ApplicantManager.apply(open_gig.id, student_user.id, student_user.username)

        with patch.object(Applicant, 'save', side_effect=DatabaseError('lock wait timeout')):
            with pytest.raises(PersistenceError):
                ApplicantManager.decide(open_gig.id, student_user.id, 'accepted', client_user.id)

        open_gig.refresh_from_db()
        assert open_gig.status == 'open'
        assert open_gig.selected_student is None
        assert open_gig.applicants.get(student=student_user).status == 'pending'

    def test_notification_waits_for_commit(self, open_gig, client_user, student_user,
                                           django_capture_on_commit_callbacks):
        ApplicantManager.apply(open_gig.id, student_user.id, student_user.username)

        with django_capture_on_commit_callbacks(execute=False) as callbacks:
            ApplicantManager.decide(open_gig.id, student_user.id, 'accepted', client_user.id)

        assert len(callbacks) == 1
        assert not Notification.objects.filter(recipient=student_user).exists()

        callbacks[0]()
        assert Notification.objects.filter(recipient=student_user, type='application_status_update').count() == 1


# ============================================================================
# CLOSE AND INVITE
# ============================================================================

@pytest.mark.django_db
class TestCloseGig:

    def test_close_open_gig(self, open_gig, client_user, student_user):
        ApplicantManager.apply(open_gig.id, student_user.id, student_user.username)

        gig = ApplicantManager.close_gig(open_gig.id, client_user.id)

        assert gig.status == 'closed'
        assert gig.applicants.get(student=student_user).status == 'pending'

    def test_closed_gig_accepts_no_applications(self, open_gig, client_user, student_user):
        ApplicantManager.close_gig(open_gig.id, client_user.id)
        with pytest.raises(GigNotOpen):
            ApplicantManager.apply(open_gig.id, student_user.id, student_user.username)

    def test_gig_in_progress_cannot_be_closed(self, in_progress_gig, client_user):
        with pytest.raises(InvalidState):
            ApplicantManager.close_gig(in_progress_gig.id, client_user.id)

    def test_only_owner_can_close(self, open_gig, student_user):
        with pytest.raises(Unauthorized):
            ApplicantManager.close_gig(open_gig.id, student_user.id)


@pytest.mark.django_db
class TestInvite:

    def test_invite_student(self, open_gig, client_user, student_user):
        gig_request = ApplicantManager.invite(open_gig.id, student_user.id, client_user.id)

        assert gig_request.status == 'pending'
        assert GigRequest.objects.filter(gig=open_gig, student=student_user).count() == 1

    def test_invite_twice(self, open_gig, client_user, student_user):
        ApplicantManager.invite(open_gig.id, student_user.id, client_user.id)
        with pytest.raises(AlreadyInvited):
            ApplicantManager.invite(open_gig.id, student_user.id, client_user.id)

    def test_invite_requires_student_profile(self, open_gig, client_user, client_factory):
        not_a_student = client_factory().user
        with pytest.raises(NotFound):
            ApplicantManager.invite(open_gig.id, not_a_student.id, client_user.id)

    def test_invite_requires_open_gig(self, in_progress_gig, client_user, other_student_user):
        with pytest.raises(GigNotOpen):
            ApplicantManager.invite(in_progress_gig.id, other_student_user.id, client_user.id)
