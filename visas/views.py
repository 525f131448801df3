import logging

from django.http import FileResponse, JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_POST

from core.exceptions import StorageError, ValidationFailed
from core.http import error_response, parse_json_body
from users.authentication import bearer_required
from .models import VisaApplication
from .serializers import serialize_application, serialize_document
from .services.documents import (
    create_signed_url, list_documents, resolve_signed_token, upload_document
)
from .services.drafts import get_owned_application, save_draft
from .services.submission import submit_application

logger = logging.getLogger(__name__)


# ========================================================
# 1. VALIDATION GATEWAY (create / autosave)
# ========================================================

@csrf_exempt
@require_POST
@bearer_required
def save_application_api(request):
    """
    API: Creates a draft (no `id`) or sparsely updates the caller's draft.
    Body: {id?, email, ...partial fields}
    """
    try:
        payload = parse_json_body(request)
        application = save_draft(request.user, payload)
        return JsonResponse({
            'success': True,
            'data': serialize_application(application)
        })

    except Exception as e:
        return error_response(e)


# ========================================================
# 2. SUBMISSION
# ========================================================

@csrf_exempt
@require_POST
@bearer_required
def submit_application_api(request):
    """
    API: draft -> submitted. Body: {applicationId}
    """
    try:
        payload = parse_json_body(request)
        application_id = payload.get('applicationId') or payload.get('application_id')
        if not application_id:
            raise ValidationFailed('Application ID is required')

        submit_application(request.user, application_id)
        return JsonResponse({'success': True})

    except Exception as e:
        return error_response(e)


# ========================================================
# 3. READ
# ========================================================

@require_GET
@bearer_required
def list_applications_api(request):
    applications = VisaApplication.objects.filter(user=request.user)
    return JsonResponse({
        'success': True,
        'data': [serialize_application(app) for app in applications]
    })


@require_GET
@bearer_required
def get_application_api(request, application_id):
    try:
        application = get_owned_application(request.user, application_id)
        documents = [
            serialize_document(doc, url=create_signed_url(doc))
            for doc in list_documents(application.id)
        ]
        data = serialize_application(application)
        data['documents'] = documents
        return JsonResponse({'success': True, 'data': data})

    except Exception as e:
        return error_response(e)


# ========================================================
# 4. DOCUMENTS
# ========================================================

@csrf_exempt
@require_POST
@bearer_required
def upload_document_api(request, application_id):
    """
    API: multipart upload of one document (fields: document_type, file).
    """
    try:
        document = upload_document(
            request.user, application_id, request.POST, request.FILES)
        return JsonResponse({
            'success': True,
            'data': serialize_document(document, url=create_signed_url(document))
        }, status=201)

    except Exception as e:
        return error_response(e)


@require_GET
def download_document(request, token):
    """
    Serves a document behind a signed, time-limited link.
    """
    try:
        document = resolve_signed_token(token)
        try:
            handle = document.file.open('rb')
        except (FileNotFoundError, OSError) as e:
            logger.error(f"Document file missing for {document.id}: {e}")
            raise StorageError('Document file is not available')

        return FileResponse(
            handle,
            as_attachment=False,
            filename=document.file_name,
            content_type=document.mime_type or None,
        )

    except Exception as e:
        return error_response(e)
