import pytest
from django.urls import reverse

from core.models import AuditEvent
from finance.models import CreditAccount, Payment
from finance.services import payments

pytestmark = pytest.mark.django_db


def capture_event(event_type, order_id, capture_id='CAP-WH'):
    return {
        'id': f'WH-{event_type}',
        'event_type': event_type,
        'resource': {
            'id': capture_id,
            'payer': {'email_address': 'payer@example.com'},
            'supplementary_data': {'related_ids': {'order_id': order_id}},
        },
    }


def send(client, event):
    return client.post(reverse('finance:paypal_webhook'), event, content_type='application/json')


@pytest.fixture
def order(user, paypal):
    payment, _ = payments.create_order(user, {})
    return payment.paypal_order_id


def test_order_approved_moves_to_pending(client, order):
    response = send(client, {'id': 'WH-1', 'event_type': 'CHECKOUT.ORDER.APPROVED',
                             'resource': {'id': order}})

    assert response.json() == {'received': True, 'result': 'pending'}
    assert Payment.objects.get(paypal_order_id=order).status == 'pending'


def test_capture_completed_reconciles(client, user, order):
    response = send(client, capture_event('PAYMENT.CAPTURE.COMPLETED', order))

    assert response.json()['result'] == 'completed'
    payment = Payment.objects.get(paypal_order_id=order)
    assert payment.status == 'completed'
    assert payment.paypal_capture_id == 'CAP-WH'
    assert CreditAccount.objects.get(user=user).available == 1
    assert AuditEvent.objects.filter(action='webhook_received').count() == 1


def test_webhook_and_capture_call_reconcile_once(client, api_client, user, order, paypal):
    send(client, capture_event('PAYMENT.CAPTURE.COMPLETED', order))
    api_client.post(reverse('finance:api_payment_capture'), {'orderId': order},
                    content_type='application/json')
    send(client, capture_event('PAYMENT.CAPTURE.COMPLETED', order))

    assert CreditAccount.objects.get(user=user).available == 1
    assert paypal.captured == []


def test_capture_denied_fails_the_payment(client, order):
    send(client, capture_event('PAYMENT.CAPTURE.DENIED', order))
    assert Payment.objects.get(paypal_order_id=order).status == 'failed'


def test_refund_at_processor(client, user, order):
    send(client, capture_event('PAYMENT.CAPTURE.COMPLETED', order))
    response = send(client, capture_event('PAYMENT.CAPTURE.REFUNDED', order, capture_id='REF-1'))

    assert response.json()['result'] == 'refunded'
    payment = Payment.objects.get(paypal_order_id=order)
    assert payment.status == 'refunded'
    assert payment.credit_state == 'revoked'
    assert CreditAccount.objects.get(user=user).available == 0


def test_unknown_order_and_event_are_acknowledged(client):
    assert send(client, capture_event('PAYMENT.CAPTURE.COMPLETED', 'ORDER-NONE')).json()['result'] == 'ignored'
    assert send(client, {'id': 'WH-9', 'event_type': 'BILLING.PLAN.CREATED'}).json()['result'] == 'ignored'


def test_bad_signature_is_refused(client, order, paypal, settings):
    settings.PAYPAL_VERIFY_WEBHOOKS = True
    paypal.verified = False

    response = send(client, capture_event('PAYMENT.CAPTURE.COMPLETED', order))

    assert response.status_code == 401
    assert Payment.objects.get(paypal_order_id=order).status == 'initiated'


def test_invalid_json_is_refused(client):
    response = client.post(reverse('finance:paypal_webhook'), 'not json', content_type='application/json')
    assert response.status_code == 400
