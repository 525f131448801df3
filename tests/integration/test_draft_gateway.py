import uuid

import pytest
from django.db import DatabaseError
from django.urls import reverse

from core.models import AuditEvent
from visas.models import VisaApplication

pytestmark = pytest.mark.django_db

def save(client, payload):
    return client.post(reverse('visas:api_application_save'), payload, content_type='application/json')


def create(client, **fields):
    payload = {'email': 'alice@example.com', 'surname': 'Walker'}
    payload.update(fields)
    response = save(client, payload)
    assert response.status_code == 200, response.json()
    return response.json()['data']


def test_first_save_creates_a_draft(api_client, user):
    data = create(api_client, given_name='Alice')

    application = VisaApplication.objects.get(pk=data['id'])
    assert application.user == user
    assert application.status == 'draft'
    assert application.is_locked is False
    assert application.full_name == 'Walker Alice'
    assert application.last_autosave_at is not None
    assert data['status'] == 'draft'
    assert AuditEvent.objects.filter(action='application_created', entity_id=data['id']).exists()


def test_create_requires_email(api_client):
    response = save(api_client, {'surname': 'Walker'})

    assert response.status_code == 400
    body = response.json()
    assert body['error'] == 'Validation failed'
    assert body['details'][0]['field'] == 'email'
    assert not VisaApplication.objects.exists()


def test_update_is_sparse(api_client):
    data = create(api_client, given_name='Alice', place_of_birth='Leeds')

    response = save(api_client, {'id': data['id'], 'given_name': 'Alicia', 'place_of_birth': ''})

    assert response.status_code == 200
    application = VisaApplication.objects.get(pk=data['id'])
    assert application.given_name == 'Alicia'
    assert application.place_of_birth == 'Leeds'
    assert application.surname == 'Walker'
    assert application.full_name == 'Walker Alicia'


def test_interleaved_partial_saves_keep_both_fields(api_client):
    data = create(api_client)

    save(api_client, {'id': data['id'], 'father_name': 'John Walker'})
    save(api_client, {'id': data['id'], 'mother_name': 'Mary Walker'})

    application = VisaApplication.objects.get(pk=data['id'])
    assert application.father_name == 'John Walker'
    assert application.mother_name == 'Mary Walker'


def test_status_in_payload_is_ignored(api_client):
    data = create(api_client)

    save(api_client, {'id': data['id'], 'status': 'approved', 'is_locked': True, 'is_paid': True})

    application = VisaApplication.objects.get(pk=data['id'])
    assert (application.status, application.is_locked, application.is_paid) == ('draft', False, False)


def test_field_errors_are_listed(api_client):
    data = create(api_client)

    response = save(api_client, {'id': data['id'], 'date_of_birth': '12/04/1990', 'gender': 'x'})

    assert response.status_code == 400
    fields = sorted(issue['field'] for issue in response.json()['details'])
    assert fields == ['date_of_birth', 'gender']


def test_another_users_draft_is_forbidden(api_client, other_client):
    data = create(api_client)

    response = save(other_client, {'id': data['id'], 'surname': 'Mallory'})

    assert response.status_code == 403
    assert VisaApplication.objects.get(pk=data['id']).surname == 'Walker'


def test_unknown_or_malformed_id(api_client):
    assert save(api_client, {'id': str(uuid.uuid4()), 'surname': 'X'}).status_code == 404
    assert save(api_client, {'id': 'not-a-uuid', 'surname': 'X'}).status_code == 400


def test_submitted_application_cannot_be_modified(api_client):
    data = create(api_client)
    VisaApplication.objects.filter(pk=data['id']).update(status='submitted', is_locked=True)

    response = save(api_client, {'id': data['id'], 'surname': 'Changed'})

    assert response.status_code == 400
    assert response.json()['error'] == 'Cannot modify a submitted application'
    assert VisaApplication.objects.get(pk=data['id']).surname == 'Walker'


def test_submit_between_check_and_write_is_refused(api_client, user, monkeypatch):
    from visas.services import drafts

    data = create(api_client)
    original = drafts.derive_full_name

    def submit_meanwhile(current, changes):
        VisaApplication.objects.filter(pk=current.pk).update(status='submitted', is_locked=True)
        return original(current, changes)

    monkeypatch.setattr(drafts, 'derive_full_name', submit_meanwhile)

    response = save(api_client, {'id': data['id'], 'surname': 'Late'})

    assert response.status_code == 400
    assert VisaApplication.objects.get(pk=data['id']).surname == 'Walker'


def test_storage_failure_is_a_500(api_client, monkeypatch):
    data = create(api_client)

    def broken_update(self, **kwargs):
        raise DatabaseError('disk full')

    monkeypatch.setattr('django.db.models.query.QuerySet.update', broken_update)

    response = save(api_client, {'id': data['id'], 'surname': 'X'})

    assert response.status_code == 500
    assert response.json()['error'] == 'Failed to update application'


def test_read_endpoints_are_owner_scoped(api_client, other_client):
    data = create(api_client)

    listed = api_client.get(reverse('visas:api_application_list')).json()['data']
    assert [a['id'] for a in listed] == [data['id']]
    assert other_client.get(reverse('visas:api_application_list')).json()['data'] == []

    detail = api_client.get(reverse('visas:api_application_detail', args=[data['id']]))
    assert detail.status_code == 200
    assert detail.json()['data']['documents'] == []
    assert other_client.get(
        reverse('visas:api_application_detail', args=[data['id']])).status_code == 403


def test_reload_returns_the_saved_values(api_client):
    data = create(
        api_client,
        date_of_birth='1990-04-12',
        changed_name=False,
        security_asylum_sought=True,
        countries_visited_last_10_years=['France', 'Spain'],
        arrival_point_id='6f1c2d4e-8a9b-4c3d-9e8f-0a1b2c3d4e5f',
    )

    reloaded = api_client.get(
        reverse('visas:api_application_detail', args=[data['id']])).json()['data']

    assert reloaded['date_of_birth'] == '1990-04-12'
    assert reloaded['changed_name'] is False
    assert reloaded['security_asylum_sought'] is True
    assert reloaded['countries_visited_last_10_years'] == ['France', 'Spain']
    assert reloaded['arrival_point_id'] == '6f1c2d4e-8a9b-4c3d-9e8f-0a1b2c3d4e5f'
    assert reloaded['religion'] == ''


def test_wrongly_typed_values_are_rejected_not_coerced(api_client):
    data = create(api_client, given_name='Alice', passport_number='P123')

    response = save(api_client, {
        'id': data['id'],
        'given_name': ['x', 'y'],
        'passport_number': 12345,
        'declaration_accepted': 'yes',
        'nationality_by_birth': 'false',
    })

    assert response.status_code == 400
    fields = sorted(issue['field'] for issue in response.json()['details'])
    assert fields == ['declaration_accepted', 'given_name', 'nationality_by_birth', 'passport_number']
    application = VisaApplication.objects.get(pk=data['id'])
    assert (application.given_name, application.passport_number) == ('Alice', 'P123')
    assert application.declaration_accepted is False
