"""
HustleUp test configuration: factory_boy factories and shared fixtures.

RUNNING TESTS:
# Run all tests
pytest

# Run by app
pytest apps/gigs -v
pytest apps/payments -v
"""

import uuid
from datetime import timedelta
from decimal import Decimal

import factory
import pytest
from django.utils import timezone
from factory.django import DjangoModelFactory

from core.constants import (
    GIG_STATUS_OPEN, GIG_STATUS_IN_PROGRESS, GIG_STATUS_COMPLETED, APPLICANT_STATUS_ACCEPTED,
)


# ============================================================================
# USER FACTORIES
# ============================================================================

class UserFactory(DjangoModelFactory):
    class Meta:
        model = 'users.User'
        django_get_or_create = ('username',)

    username = factory.LazyAttribute(lambda o: f"user_{uuid.uuid4().hex[:8]}")
    email = factory.LazyAttribute(lambda o: f"{o.username}@example.com")
    first_name = factory.Faker('first_name')
    last_name = factory.Faker('last_name')
    phone_number = None
    password = factory.django.Password('testpass123')
    is_active = True


class SuperUserFactory(UserFactory):
    is_staff = True
    is_superuser = True


class ClientFactory(DjangoModelFactory):
    class Meta:
        model = 'users.Client'

    user = factory.SubFactory(UserFactory)
    company_name = factory.Faker('company')
    location = 'Bengaluru'


class StudentFactory(DjangoModelFactory):
    class Meta:
        model = 'users.Student'

    user = factory.SubFactory(UserFactory)
    skills = factory.LazyFunction(lambda: ['Design'])


# ============================================================================
# GIG FACTORIES
# ============================================================================

class GigFactory(DjangoModelFactory):
    class Meta:
        model = 'gigs.Gig'

    client = factory.LazyFunction(lambda: ClientFactory().user)
    client_username = factory.LazyAttribute(lambda o: o.client.username)
    title = factory.Faker('sentence', nb_words=4)
    description = factory.Faker('paragraph')
    required_skills = factory.LazyFunction(lambda: ['Design'])
    budget = Decimal('10000.00')
    currency = 'INR'
    deadline = factory.LazyFunction(lambda: timezone.now() + timedelta(days=14))
    status = GIG_STATUS_OPEN


class ApplicantFactory(DjangoModelFactory):
    class Meta:
        model = 'gigs.Applicant'

    gig = factory.SubFactory(GigFactory)
    student = factory.LazyFunction(lambda: StudentFactory().user)
    student_username = factory.LazyAttribute(lambda o: o.student.username)
    message = 'I would love to work on this.'


class ReviewFactory(DjangoModelFactory):
    class Meta:
        model = 'gigs.Review'

    gig = factory.SubFactory(GigFactory, status=GIG_STATUS_COMPLETED)
    client = factory.LazyAttribute(lambda o: o.gig.client)
    student = factory.LazyFunction(lambda: StudentFactory().user)
    rating = 4
    comment = 'Solid work.'


class TransactionFactory(DjangoModelFactory):
    class Meta:
        model = 'payments.Transaction'

    gig = factory.SubFactory(GigFactory, status=GIG_STATUS_COMPLETED)
    client = factory.LazyAttribute(lambda o: o.gig.client)
    student = factory.LazyFunction(lambda: StudentFactory().user)
    amount = factory.LazyAttribute(lambda o: o.gig.budget)
    currency = 'INR'
    status = 'succeeded'
    external_reference = factory.LazyFunction(lambda: f"pay_{uuid.uuid4().hex[:14]}")
    external_order_id = factory.LazyFunction(lambda: f"order_{uuid.uuid4().hex[:14]}")
    paid_at = factory.LazyFunction(timezone.now)


# ============================================================================
# PAYMENT GATEWAY DOUBLE
# ============================================================================

class FakeGateway:
    """Stands in for RazorpayGateway; records orders and serves canned payments."""

    key_id = 'rzp_test_key'

    def __init__(self):
        self.orders = []
        self.payments = {}
        self.checkout_signature_valid = True
        self.webhook_signature_valid = True

    def create_order(self, amount, currency, receipt, notes):
        order = {'id': f"order_{len(self.orders) + 1}", 'amount': amount, 'currency': currency,
                 'receipt': receipt, 'notes': notes}
        self.orders.append(order)
        return order

    def fetch_payment(self, payment_id):
        return self.payments[payment_id]

    def verify_checkout_signature(self, order_id, payment_id, signature):
        return self.checkout_signature_valid

    def verify_webhook_signature(self, body, signature):
        return self.webhook_signature_valid


# ============================================================================
# FIXTURES
# ============================================================================

@pytest.fixture(autouse=True)
def celery_eager():
    """Run Celery tasks synchronously so queued deliveries land in mail.outbox."""
    from hustleup.celery import app
    app.conf.update(CELERY_TASK_ALWAYS_EAGER=True, CELERY_TASK_EAGER_PROPAGATES=True, CELERY_BROKER_URL='memory://')
    yield app


@pytest.fixture
def client_user(db):
    return ClientFactory().user


@pytest.fixture
def student_user(db):
    return StudentFactory().user


@pytest.fixture
def other_student_user(db):
    return StudentFactory(skills=['Writing']).user


@pytest.fixture
def superuser(db):
    return SuperUserFactory()


@pytest.fixture
def api_client(db):
    """Provide a DRF API test client."""
    from rest_framework.test import APIClient
    return APIClient()


@pytest.fixture
def open_gig(client_user):
    return GigFactory(client=client_user, title='Logo design for a campus startup')


@pytest.fixture
def in_progress_gig(open_gig, student_user):
    """An open gig whose client has accepted ``student_user``."""
    ApplicantFactory(gig=open_gig, student=student_user, status=APPLICANT_STATUS_ACCEPTED,
                     decided_at=timezone.now())
    open_gig.status = GIG_STATUS_IN_PROGRESS
    open_gig.selected_student = student_user
    open_gig.save()
    return open_gig


@pytest.fixture
def completed_gig(in_progress_gig):
    in_progress_gig.status = GIG_STATUS_COMPLETED
    in_progress_gig.save()
    return in_progress_gig


@pytest.fixture
def fake_gateway():
    return FakeGateway()


@pytest.fixture
def payment_engine(fake_gateway):
    from apps.payments.engine import PaymentEngine
    return PaymentEngine(gateway=fake_gateway, commission_rate=Decimal('0.02'), payout_model='direct')


@pytest.fixture
def split_payment_engine(fake_gateway):
    from apps.payments.engine import PaymentEngine
    return PaymentEngine(gateway=fake_gateway, commission_rate=Decimal('0.02'), payout_model='split')


@pytest.fixture
def payment_notes():
    """Order notes as the gateway echoes them back for a gig."""
    def _notes(gig):
        return {'gigId': str(gig.id), 'clientId': str(gig.client_id), 'studentId': str(gig.selected_student_id)}
    return _notes


@pytest.fixture
def client_factory(db):
    return ClientFactory


@pytest.fixture
def student_factory(db):
    return StudentFactory


@pytest.fixture
def gig_factory(db):
    return GigFactory


@pytest.fixture
def applicant_factory(db):
    return ApplicantFactory


@pytest.fixture
def review_factory(db):
    return ReviewFactory


@pytest.fixture
def transaction_factory(db):
    return TransactionFactory
