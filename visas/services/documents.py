import logging

from django.conf import settings
from django.core import signing
from django.db import DatabaseError
from django.urls import reverse

from core.exceptions import NotFound, StorageError, ValidationFailed
from core.services.audit import log_event
from ..forms import ApplicationDocumentForm
from ..models import ApplicationDocument
from .drafts import get_owned_draft

logger = logging.getLogger(__name__)


def list_documents(application_id):
    return ApplicationDocument.objects.filter(application_id=application_id)


def uploaded_document_types(application_id):
    return set(
        list_documents(application_id).values_list('document_type', flat=True)
    )


# =========================================================
# SIGNED, TIME-LIMITED URLS
# =========================================================

def create_signed_url(document):
    token = signing.dumps(
        {'doc': str(document.id)}, salt=settings.DOCUMENT_URL_SALT)
    path = reverse('visas:document_download', args=[token])
    return f"{settings.SITE_URL.rstrip('/')}{path}"


def signed_urls(application_id):
    return [
        {
            'document_type': doc.document_type,
            'file_name': doc.file_name,
            'url': create_signed_url(doc),
        }
        for doc in list_documents(application_id)
    ]


def resolve_signed_token(token):
    """
    Returns the document a download token points to.
    Expired or tampered tokens look exactly like unknown documents.
    """
    try:
        payload = signing.loads(
            token,
            salt=settings.DOCUMENT_URL_SALT,
            max_age=settings.DOCUMENT_URL_MAX_AGE
        )
    except signing.BadSignature:
        raise NotFound('Document link is invalid or has expired')

    document = ApplicationDocument.objects.filter(pk=payload.get('doc')).first()
    if document is None:
        raise NotFound('Document not found')
    return document


# =========================================================
# UPLOAD
# =========================================================

def upload_document(user, application_id, data, files):
    """
    Attaches one file to a draft owned by `user`.
    """
    application = get_owned_draft(user, application_id)

    form = ApplicationDocumentForm(data, files)
    if not form.is_valid():
        raise ValidationFailed(
            'Invalid document',
            details=[
                {'field': field, 'message': error['message'], 'code': error['code']}
                for field, errors in form.errors.get_json_data().items()
                for error in errors
            ]
        )

    uploaded = form.cleaned_data['file']
    document = form.save(commit=False)
    document.application = application
    document.file_name = uploaded.name
    document.mime_type = getattr(uploaded, 'content_type', '') or ''
    document.file_size = uploaded.size

    try:
        document.save()
    except (DatabaseError, OSError) as e:
        logger.exception(f"Document upload failed for application {application.id}: {e}")
        raise StorageError('Failed to store document')

    log_event(
        'document_uploaded', 'application', application.id, user=user,
        changes={'document_type': document.document_type, 'file_name': document.file_name}
    )
    logger.info(
        f"Document {document.document_type} uploaded to application {application.id}")
    return document
