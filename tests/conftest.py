"""Shared fixtures for the portal tests."""

import uuid

import pytest
from django.test import Client

from users.authentication import issue_token


@pytest.fixture(autouse=True)
def portal_settings(settings, tmp_path):
    """Keep files and outbound calls inside the test run."""
    settings.MEDIA_ROOT = tmp_path / 'media'
    settings.EMAIL_BACKEND = 'django.core.mail.backends.locmem.EmailBackend'
    settings.PAYPAL_VERIFY_WEBHOOKS = False
    settings.STAFF_NOTIFICATION_EMAILS = ['staff@visa-portal.test']
    settings.SITE_URL = 'http://testserver'
    return settings


@pytest.fixture
def user(django_user_model):
    return django_user_model.objects.create_user(
        username='alice', email='alice@example.com', password='s3cret-pass',
        first_name='Alice', last_name='Walker')


@pytest.fixture
def other_user(django_user_model):
    return django_user_model.objects.create_user(
        username='bob', email='bob@example.com', password='s3cret-pass')


def bearer_client(user):
    client = Client()
    client.defaults['HTTP_AUTHORIZATION'] = f'Bearer {issue_token(user)}'
    return client


@pytest.fixture
def api_client(user):
    return bearer_client(user)


@pytest.fixture
def other_client(other_user):
    return bearer_client(other_user)


@pytest.fixture
def complete_fields():
    """Every required form field, for a non-Indian applicant."""
    return {
        'surname': 'Walker',
        'given_name': 'Alice',
        'date_of_birth': '1990-04-12',
        'gender': 'female',
        'place_of_birth': 'Leeds',
        'country_of_birth': 'United Kingdom',
        'nationality': 'United Kingdom',
        'passport_number': '123456789',
        'passport_place_of_issue': 'London',
        'passport_issue_date': '2020-01-15',
        'passport_expiry_date': '2030-01-14',
        'email': 'alice@example.com',
        'mobile_number': '447700900123',
        'present_address_house_street': '1 High Street',
        'present_address_village_town': 'Leeds',
        'present_address_country': 'United Kingdom',
        'father_name': 'John Walker',
        'father_nationality': 'United Kingdom',
        'mother_name': 'Mary Walker',
        'mother_nationality': 'United Kingdom',
        'marital_status': 'single',
        'visa_type': 'tourist',
        'duration_of_stay': '30 days',
        'intended_arrival_date': '2026-12-01',
        'arrival_point_id': str(uuid.UUID('6f1c2d4e-8a9b-4c3d-9e8f-0a1b2c3d4e5f')),
        'reference_india_name': 'R. Sharma',
        'reference_india_address': '12 MG Road, Bengaluru',
        'reference_india_phone': '919800000000',
        'reference_home_name': 'P. Smith',
        'reference_home_address': '5 Low Lane, Leeds',
        'reference_home_phone': '447700900999',
        'declaration_accepted': True,
    }


class ManualScheduler:
    """Scheduler whose timers only fire when the test says so."""

    def __init__(self):
        self.calls = []

    def call_later(self, delay, callback):
        handle = ManualHandle(delay, callback)
        self.calls.append(handle)
        return handle

    @property
    def pending(self):
        return [h for h in self.calls if not h.cancelled and not h.fired]

    def run_pending(self):
        for handle in list(self.pending):
            handle.fire()


class ManualHandle:

    def __init__(self, delay, callback):
        self.delay = delay
        self.callback = callback
        self.cancelled = False
        self.fired = False

    def cancel(self):
        self.cancelled = True

    def fire(self):
        self.fired = True
        self.callback()


@pytest.fixture
def scheduler():
    return ManualScheduler()


class FakePayPalClient:
    """Stands in for finance.services.paypal.PayPalClient."""

    def __init__(self):
        self.orders = []
        self.captured = []
        self.decline = None
        self.verified = True

    def create_order(self, reference_id, description, amount, currency):
        order_id = f"ORDER-{len(self.orders) + 1:04d}"
        self.orders.append({
            'id': order_id, 'reference_id': reference_id,
            'description': description, 'amount': amount, 'currency': currency,
        })
        return {
            'id': order_id,
            'status': 'CREATED',
            'links': [
                {'rel': 'self', 'href': f'https://api.sandbox.paypal.test/v2/checkout/orders/{order_id}'},
                {'rel': 'approve', 'href': f'https://www.sandbox.paypal.test/checkoutnow?token={order_id}'},
            ],
        }

    def capture_order(self, order_id):
        if self.decline is not None:
            raise self.decline
        self.captured.append(order_id)
        return {
            'id': order_id,
            'status': 'COMPLETED',
            'payer': {
                'email_address': 'payer@example.com',
                'name': {'given_name': 'Alice', 'surname': 'Walker'},
            },
            'purchase_units': [{
                'payments': {'captures': [{
                    'id': f'CAP-{order_id}',
                    'amount': {'value': '49.90', 'currency_code': 'USD'},
                }]},
            }],
        }

    def verify_webhook(self, headers, event):
        return self.verified


@pytest.fixture
def paypal(monkeypatch):
    fake = FakePayPalClient()
    monkeypatch.setattr('finance.services.payments.get_client', lambda: fake)
    monkeypatch.setattr('finance.services.webhooks.get_client', lambda: fake)
    return fake
