import pytest
from django.urls import reverse

from core.exceptions import StorageError
from finance.models import CreditAccount, CreditTransaction, Payment
from finance.services import credits, payments
from visas.models import VisaApplication

pytestmark = pytest.mark.django_db


def paid_credit(user):
    payment, _ = payments.create_order(user, {})
    payments.complete_payment(payment.paypal_order_id, f'CAP-{payment.paypal_order_id}')
    return Payment.objects.get(pk=payment.pk)


def redeem(client):
    return client.post(reverse('finance:api_credit_redeem'))


def test_redeem_creates_a_paid_draft(api_client, user, paypal):
    payment = paid_credit(user)

    response = redeem(api_client)

    assert response.status_code == 201
    data = response.json()['data']
    assert data['status'] == 'draft'
    assert data['is_paid'] is True
    assert data['email'] == 'alice@example.com'

    payment.refresh_from_db()
    assert payment.credit_state == 'redeemed'
    assert str(payment.application_id) == data['id']
    assert CreditAccount.objects.get(user=user).available == 0
    assert sorted(CreditTransaction.objects.values_list('transaction_type', flat=True)) == ['grant', 'redeem']


def test_redeem_without_credit(api_client):
    response = redeem(api_client)

    assert response.status_code == 400
    assert response.json()['error'] == 'No application credits available'
    assert not VisaApplication.objects.exists()


def test_each_credit_is_spent_once(api_client, user, paypal):
    paid_credit(user)

    assert redeem(api_client).status_code == 201
    assert redeem(api_client).status_code == 400
    assert VisaApplication.objects.count() == 1


def test_oldest_credit_is_spent_first(user, paypal):
    first = paid_credit(user)
    second = paid_credit(user)

    application = credits.redeem_credit(user)

    assert Payment.objects.get(pk=first.pk).application == application
    assert Payment.objects.get(pk=second.pk).credit_state == 'available'
    assert CreditAccount.objects.get(user=user).available == 1


def test_failed_draft_insert_keeps_the_credit(user, paypal, monkeypatch):
    paid_credit(user)

    def broken_create_draft(user, fields):
        raise StorageError('Failed to create application')

    monkeypatch.setattr(credits, 'create_draft', broken_create_draft)

    with pytest.raises(StorageError):
        credits.redeem_credit(user)

    assert CreditAccount.objects.get(user=user).available == 1
    assert Payment.objects.get(user=user).credit_state == 'available'
    assert CreditTransaction.objects.filter(transaction_type='redeem').count() == 0


def test_redeemed_credit_is_not_revoked_by_refund(user, paypal):
    payment = paid_credit(user)
    credits.redeem_credit(user)

    payments.refund_payment(payment.paypal_order_id)

    assert Payment.objects.get(pk=payment.pk).credit_state == 'redeemed'
    assert CreditAccount.objects.get(user=user).available == 0


def test_counter_never_goes_negative(user):
    assert credits.move_credits(user, 'revoke', 'nothing to take') is None
    assert CreditAccount.objects.get(user=user).available == 0


def test_credits_endpoint(api_client, user, paypal):
    paid_credit(user)

    body = api_client.get(reverse('finance:api_credits')).json()

    assert body['available'] == 1
    assert len(body['credits']) == 1
    assert [entry['type'] for entry in body['history']] == ['grant']
