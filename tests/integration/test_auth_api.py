import pytest
from django.core import signing
from django.urls import reverse

from users.authentication import issue_token

pytestmark = pytest.mark.django_db


def test_token_for_valid_credentials(client, user):
    response = client.post(
        reverse('api_token'),
        {'email': 'alice@example.com', 'password': 's3cret-pass'},
        content_type='application/json')

    assert response.status_code == 200
    body = response.json()
    assert body['user'] == {'id': user.pk, 'email': 'alice@example.com'}
    assert body['token']


def test_wrong_password_is_rejected(client, user):
    response = client.post(
        reverse('api_token'),
        {'email': 'alice@example.com', 'password': 'nope'},
        content_type='application/json')

    assert response.status_code == 401
    assert response.json()['error'] == 'Invalid credentials'
    assert response.json()['code'] == 'unauthorized'


def test_malformed_login_is_a_validation_error(client, user):
    response = client.post(
        reverse('api_token'),
        {'email': 'not-an-email'},
        content_type='application/json')

    assert response.status_code == 400
    assert set(response.json()['details']) == {'email', 'password'}


def test_missing_header_is_401(client):
    response = client.get(reverse('visas:api_application_list'))
    assert response.status_code == 401
    assert response.json()['details'] == 'No authorization header'


def test_tampered_token_is_401(client, user):
    token = issue_token(user) + 'x'
    response = client.get(
        reverse('visas:api_application_list'), HTTP_AUTHORIZATION=f'Bearer {token}')
    assert response.status_code == 401
    assert response.json()['details'] == 'Invalid token'


def test_inactive_user_is_401(client, user):
    token = issue_token(user)
    user.is_active = False
    user.save()

    response = client.get(
        reverse('visas:api_application_list'), HTTP_AUTHORIZATION=f'Bearer {token}')
    assert response.status_code == 401


def test_token_from_another_salt_is_rejected(client, user):
    token = signing.dumps({'uid': user.pk}, salt='something-else')
    response = client.get(
        reverse('visas:api_application_list'), HTTP_AUTHORIZATION=f'Bearer {token}')
    assert response.status_code == 401


def test_display_name_falls_back_to_email(user, other_user):
    assert user.display_name == 'Alice Walker'
    assert other_user.display_name == 'bob@example.com'
