import json
import logging

from django.http import JsonResponse

from .exceptions import PortalError, ValidationFailed

logger = logging.getLogger(__name__)


def parse_json_body(request):
    """
    Reads the request body as a JSON object.
    An empty body is treated as {}.
    """
    if not request.body:
        return {}
    try:
        data = json.loads(request.body)
    except (ValueError, UnicodeDecodeError):
        raise ValidationFailed('Request body must be valid JSON')

    if not isinstance(data, dict):
        raise ValidationFailed('Request body must be a JSON object')
    return data


def error_response(exc):
    if isinstance(exc, PortalError):
        return JsonResponse(exc.as_dict(), status=exc.status_code)

    logger.exception(f"Unhandled error: {exc}")
    return JsonResponse({'error': 'Internal server error'}, status=500)
