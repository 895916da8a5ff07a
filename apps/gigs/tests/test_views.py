from datetime import timedelta
from decimal import Decimal
from unittest.mock import patch

import pytest
from django.db import DatabaseError
from django.urls import reverse
from django.utils import timezone

from apps.gigs.models import Gig
from apps.gigs.serializers import GigSerializer
from apps.gigs.services import ApplicantManager
from core.exceptions import InvalidState


@pytest.mark.django_db
class TestGigEndpoints:

    def gig_payload(self, **overrides):
        payload = {
            'title': 'Design a poster for the tech fest',
            'description': 'A3 poster, two revisions.',
            'required_skills': ['Graphic Design', 'Illustrator'],
            'budget': '1500.00',
            'deadline': (timezone.now() + timedelta(days=10)).isoformat(),
        }
        payload.update(overrides)
        return payload

    def test_client_posts_gig(self, api_client, client_user):
        api_client.force_authenticate(user=client_user)

        response = api_client.post(reverse('gig_create'), self.gig_payload(), format='json')

        assert response.status_code == 201
        assert response.data['status'] == 'open'
        assert response.data['client_username'] == client_user.username
        assert response.data['currency'] == 'INR'
        assert Decimal(response.data['net_payout']) == Decimal('1470.00')

    def test_student_cannot_post_gig(self, api_client, student_user):
        api_client.force_authenticate(user=student_user)
        response = api_client.post(reverse('gig_create'), self.gig_payload(), format='json')
        assert response.status_code == 403

    def test_skills_must_be_a_list(self, api_client, client_user):
        api_client.force_authenticate(user=client_user)
        response = api_client.post(reverse('gig_create'), self.gig_payload(required_skills='Design'), format='json')
        assert response.status_code == 400

    def test_edit_open_gig(self, api_client, client_user, open_gig):
        api_client.force_authenticate(user=client_user)

        response = api_client.put(
            reverse('gig_update', args=[open_gig.id]),
            {'title': 'New title', 'status': 'completed'},
            format='json'
        )

        open_gig.refresh_from_db()
        assert response.status_code == 200
        assert open_gig.title == 'New title'
        assert open_gig.status == 'open'

    def test_edit_gig_in_progress_is_rejected(self, api_client, client_user, in_progress_gig):
        api_client.force_authenticate(user=client_user)

        response = api_client.put(reverse('gig_update', args=[in_progress_gig.id]), {'title': 'x'}, format='json')

        assert response.status_code == 409
        assert response.data['code'] == 'invalid_state'

    def test_edit_checks_status_on_locked_row(self, client_user, student_user, open_gig, rf):
        ApplicantManager.apply(open_gig.id, student_user.id, student_user.username)
        request = rf.put('/')
        request.user = client_user
        serializer = GigSerializer(open_gig, data={'title': 'Edited'}, partial=True, context={'request': request})
        assert serializer.is_valid(), serializer.errors

        # Acceptance commits after the edit form was loaded
        ApplicantManager.decide(open_gig.id, student_user.id, 'accepted', client_user.id)

        with pytest.raises(InvalidState):
            serializer.save()

        gig = Gig.objects.get(pk=open_gig.id)
        assert gig.status == 'in_progress'
        assert gig.selected_student == student_user
        assert gig.title == 'Logo design for a campus startup'

    def test_edit_writes_only_submitted_fields(self, client_user, open_gig, rf):
        request = rf.put('/')
        request.user = client_user
        serializer = GigSerializer(open_gig, data={'title': 'Edited'}, partial=True, context={'request': request})
        assert serializer.is_valid(), serializer.errors
        Gig.objects.filter(pk=open_gig.id).update(description='Changed elsewhere')

        serializer.save()

        gig = Gig.objects.get(pk=open_gig.id)
        assert gig.title == 'Edited'
        assert gig.description == 'Changed elsewhere'

    def test_client_lists_own_gigs(self, api_client, client_user, open_gig, gig_factory):
        gig_factory()
        api_client.force_authenticate(user=client_user)

        response = api_client.get(reverse('gig_list'))

        assert [g['id'] for g in response.data] == [open_gig.id]

    def test_detail_shows_applicants_to_owner_only(self, api_client, client_user, student_user, open_gig,
                                                   applicant_factory):
        applicant_factory(gig=open_gig, student=student_user)

        api_client.force_authenticate(user=client_user)
        assert len(api_client.get(reverse('gig_detail', args=[open_gig.id])).data['applicants']) == 1

        api_client.force_authenticate(user=student_user)
        assert 'applicants' not in api_client.get(reverse('gig_detail', args=[open_gig.id])).data

    def test_close_gig(self, api_client, client_user, open_gig):
        api_client.force_authenticate(user=client_user)

        response = api_client.post(reverse('gig_close', args=[open_gig.id]))

        assert response.status_code == 200
        assert response.data['status'] == 'closed'


@pytest.mark.django_db
class TestApplicantEndpoints:

    def test_apply_and_reapply(self, api_client, student_user, open_gig):
        api_client.force_authenticate(user=student_user)
        url = reverse('gig_apply', args=[open_gig.id])

        first = api_client.post(url, {'message': 'I have a portfolio'}, format='json')
        second = api_client.post(url, {}, format='json')

        assert first.status_code == 201
        assert first.data['status'] == 'pending'
        assert second.status_code == 409
        assert second.data == {'error': 'You have already applied to this gig.', 'code': 'already_applied'}

    def test_apply_during_database_outage(self, api_client, student_user, open_gig):
        api_client.force_authenticate(user=student_user)

        with patch('apps.gigs.services.Applicant.objects.create', side_effect=DatabaseError('gone away')):
            response = api_client.post(reverse('gig_apply', args=[open_gig.id]), {}, format='json')

        assert response.status_code == 503
        assert response.data['code'] == 'persistence_error'
        assert not open_gig.applicants.exists()

    def test_apply_to_closed_gig(self, api_client, student_user, gig_factory):
        gig = gig_factory(status='closed')
        api_client.force_authenticate(user=student_user)

        response = api_client.post(reverse('gig_apply', args=[gig.id]), {}, format='json')

        assert response.status_code == 409
        assert response.data['code'] == 'gig_not_open'

    def test_apply_to_missing_gig(self, api_client, student_user):
        api_client.force_authenticate(user=student_user)
        response = api_client.post(reverse('gig_apply', args=[99999]), {}, format='json')
        assert response.status_code == 404
        assert response.data['code'] == 'gig_not_found'

    def test_list_and_decide(self, api_client, client_user, student_user, open_gig, applicant_factory):
        applicant_factory(gig=open_gig, student=student_user)
        api_client.force_authenticate(user=client_user)

        listing = api_client.get(reverse('gig_applicants', args=[open_gig.id]))
        decision = api_client.post(
            reverse('gig_applicant_decide', args=[open_gig.id, student_user.id]),
            {'decision': 'accepted'},
            format='json'
        )

        assert [a['student'] for a in listing.data] == [student_user.id]
        assert decision.status_code == 200
        assert decision.data['status'] == 'in_progress'
        assert decision.data['selected_student']['id'] == student_user.id

    def test_decide_as_other_client(self, api_client, student_user, open_gig, applicant_factory, client_factory):
        applicant_factory(gig=open_gig, student=student_user)
        api_client.force_authenticate(user=client_factory().user)

        response = api_client.post(
            reverse('gig_applicant_decide', args=[open_gig.id, student_user.id]),
            {'decision': 'accepted'},
            format='json'
        )

        assert response.status_code == 403
        assert response.data['code'] == 'unauthorized'

    def test_invalid_decision_value(self, api_client, client_user, student_user, open_gig, applicant_factory):
        applicant_factory(gig=open_gig, student=student_user)
        api_client.force_authenticate(user=client_user)

        response = api_client.post(
            reverse('gig_applicant_decide', args=[open_gig.id, student_user.id]),
            {'decision': 'maybe'},
            format='json'
        )

        assert response.status_code == 400

    def test_invite(self, api_client, client_user, student_user, open_gig):
        api_client.force_authenticate(user=client_user)
        url = reverse('gig_invite', args=[open_gig.id])

        assert api_client.post(url, {'student_id': student_user.id}, format='json').status_code == 201
        assert api_client.post(url, {'student_id': student_user.id}, format='json').status_code == 409


@pytest.mark.django_db
class TestReviewEndpoints:

    def test_review_reply_and_public_listing(self, api_client, client_user, student_user, completed_gig):
        api_client.force_authenticate(user=client_user)
        created = api_client.post(
            reverse('gig_review', args=[completed_gig.id]), {'rating': 5, 'comment': 'Superb'}, format='json'
        )
        assert created.status_code == 201

        api_client.force_authenticate(user=student_user)
        reply = api_client.post(reverse('review_reply', args=[created.data['id']]), {'text': 'Thanks!'}, format='json')
        assert reply.status_code == 200
        assert reply.data['student_reply']['text'] == 'Thanks!'

        listing = api_client.get(reverse('student_reviews', args=[student_user.id]))
        assert listing.data['student']['rating_stats'] == {'average_rating': 5.0, 'total_ratings': 1}
        assert listing.data['reviews'][0]['comment'] == 'Superb'

    def test_out_of_range_rating(self, api_client, client_user, completed_gig):
        api_client.force_authenticate(user=client_user)

        response = api_client.post(reverse('gig_review', args=[completed_gig.id]), {'rating': 7}, format='json')

        assert response.status_code == 400
        assert response.data['code'] == 'invalid_rating'

    def test_duplicate_review(self, api_client, client_user, completed_gig):
        api_client.force_authenticate(user=client_user)
        url = reverse('gig_review', args=[completed_gig.id])

        api_client.post(url, {'rating': 4}, format='json')
        response = api_client.post(url, {'rating': 2}, format='json')

        assert response.status_code == 409
        assert response.data['code'] == 'already_reviewed'
