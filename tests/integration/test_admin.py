from types import SimpleNamespace

import pytest
from django.contrib import admin
from django.test import RequestFactory
from django.urls import reverse

from core.models import AuditEvent
from finance.models import CreditAccount, Payment
from finance.services import payments
from visas.admin import VisaApplicationAdmin
from visas.models import VisaApplication
from visas.services.drafts import save_draft

pytestmark = pytest.mark.django_db


@pytest.fixture
def staff(django_user_model):
    return django_user_model.objects.create_superuser(
        username='admin', email='admin@visa-portal.test', password='admin-pass')


@pytest.fixture
def staff_client(client, staff):
    client.force_login(staff)
    return client


@pytest.fixture
def submitted(user):
    application = save_draft(user, {'email': 'alice@example.com', 'surname': 'Walker'})
    VisaApplication.objects.filter(pk=application.id).update(status='submitted', is_locked=True)
    return VisaApplication.objects.get(pk=application.id)


def run_save_model(staff, application, old_status):
    model_admin = VisaApplicationAdmin(VisaApplication, admin.site)
    request = RequestFactory().post('/admin/')
    request.user = staff
    form = SimpleNamespace(initial={'status': old_status})
    model_admin.save_model(request, application, form, change=True)


def test_status_change_is_audited_and_mailed(staff, submitted, mailoutbox):
    submitted.status = 'approved'
    submitted.admin_notes = 'Visa granted'

    run_save_model(staff, submitted, 'submitted')

    event = AuditEvent.objects.get(action='application_status_changed')
    assert event.changes == {'status': ['submitted', 'approved']}
    assert event.user == staff
    assert [m.to for m in mailoutbox] == [['alice@example.com']]
    assert 'Application Status Update' in mailoutbox[0].subject


def test_saving_without_status_change_sends_nothing(staff, submitted, mailoutbox):
    submitted.admin_notes = 'Checked passport'

    run_save_model(staff, submitted, 'submitted')

    assert not AuditEvent.objects.filter(action='application_status_changed').exists()
    assert mailoutbox == []


def test_form_fields_are_read_only_in_admin(staff):
    model_admin = VisaApplicationAdmin(VisaApplication, admin.site)
    readonly = model_admin.get_readonly_fields(None)

    assert 'surname' in readonly
    assert 'passport_number' in readonly
    assert 'status' not in readonly
    assert 'admin_notes' not in readonly


def test_change_page_renders(staff_client, submitted):
    response = staff_client.get(
        reverse('admin:visas_visaapplication_change', args=[submitted.id]))
    assert response.status_code == 200


def test_refund_action(staff_client, user, paypal):
    payment, _ = payments.create_order(user, {})
    payments.complete_payment(payment.paypal_order_id, 'CAP-1')

    response = staff_client.post(
        reverse('admin:finance_payment_changelist'),
        {'action': 'action_refund', '_selected_action': [str(payment.pk)]})

    assert response.status_code == 302
    assert Payment.objects.get(pk=payment.pk).status == 'refunded'
    assert CreditAccount.objects.get(user=user).available == 0
