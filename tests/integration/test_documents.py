import pytest
from django.core import signing
from django.core.files.uploadedfile import SimpleUploadedFile
from django.urls import reverse

from visas.models import ApplicationDocument, VisaApplication
from visas.services.documents import create_signed_url
from visas.services.drafts import save_draft

pytestmark = pytest.mark.django_db


@pytest.fixture
def draft(user):
    return save_draft(user, {'email': 'alice@example.com', 'surname': 'Walker'})


def upload(client, application_id, document_type='photo', name='photo.jpg',
           content=b'\xff\xd8\xff\xe0 jpeg', content_type='image/jpeg'):
    return client.post(
        reverse('visas:api_document_upload', args=[application_id]),
        {'document_type': document_type,
         'file': SimpleUploadedFile(name, content, content_type=content_type)})


def test_upload_stores_the_file(api_client, draft):
    response = upload(api_client, draft.id)

    assert response.status_code == 201
    data = response.json()['data']
    assert data['document_type'] == 'photo'
    assert data['file_name'] == 'photo.jpg'
    assert data['mime_type'] == 'image/jpeg'
    assert data['url'].startswith('http://testserver/visas/documents/')

    document = ApplicationDocument.objects.get(pk=data['id'])
    assert document.file.name.startswith(f'visa_uploads/{draft.id}/photo/')


def test_signed_url_serves_the_file(api_client, client, draft):
    data = upload(api_client, draft.id).json()['data']
    path = data['url'][len('http://testserver'):]

    response = client.get(path)

    assert response.status_code == 200
    assert b''.join(response.streaming_content) == b'\xff\xd8\xff\xe0 jpeg'


def test_tampered_or_foreign_tokens_are_404(client, draft):
    assert client.get(reverse('visas:document_download', args=['garbage'])).status_code == 404

    token = signing.dumps({'doc': 'x'}, salt='another-salt')
    assert client.get(reverse('visas:document_download', args=[token])).status_code == 404


def test_expired_link_is_404(api_client, client, draft, settings):
    document = ApplicationDocument.objects.get(pk=upload(api_client, draft.id).json()['data']['id'])
    url = create_signed_url(document)
    settings.DOCUMENT_URL_MAX_AGE = -1

    assert client.get(url[len('http://testserver'):]).status_code == 404


def test_unsupported_extension_is_rejected(api_client, draft):
    response = upload(api_client, draft.id, name='notes.txt', content_type='text/plain')

    assert response.status_code == 400
    assert response.json()['details'][0]['field'] == 'file'
    assert not ApplicationDocument.objects.exists()


def test_oversized_file_is_rejected(api_client, draft, settings):
    settings.DOCUMENT_MAX_UPLOAD_MB = 0

    response = upload(api_client, draft.id)

    assert response.status_code == 400


def test_unknown_document_type_is_rejected(api_client, draft):
    response = upload(api_client, draft.id, document_type='selfie')

    assert response.status_code == 400
    assert response.json()['details'][0]['field'] == 'document_type'


def test_submitted_application_takes_no_uploads(api_client, draft):
    VisaApplication.objects.filter(pk=draft.id).update(status='submitted', is_locked=True)

    assert upload(api_client, draft.id).status_code == 400


def test_other_users_cannot_upload(other_client, draft):
    assert upload(other_client, draft.id).status_code == 403


def test_detail_lists_documents_with_links(api_client, draft):
    upload(api_client, draft.id)
    upload(api_client, draft.id, document_type='passport', name='passport.pdf',
           content=b'%PDF-1.4', content_type='application/pdf')

    documents = api_client.get(
        reverse('visas:api_application_detail', args=[draft.id])).json()['data']['documents']

    assert [d['document_type'] for d in documents] == ['photo', 'passport']
    assert all(d['url'] for d in documents)
