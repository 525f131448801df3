import logging

from django.forms.forms import NON_FIELD_ERRORS
from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_POST

from core.exceptions import Unauthorized, ValidationFailed
from core.http import error_response, parse_json_body
from .authentication import issue_token
from .form import TokenRequestForm

logger = logging.getLogger(__name__)


@csrf_exempt
@require_POST
def obtain_token_api(request):
    """
    API: Exchanges email + password for a bearer token.
    """
    try:
        data = parse_json_body(request)
        form = TokenRequestForm(data=data)
        if not form.is_valid():
            details = form.errors.get_json_data()
            if form.has_error(NON_FIELD_ERRORS, 'invalid_login'):
                raise Unauthorized('Invalid credentials', details=details)
            raise ValidationFailed('Invalid credentials', details=details)

        token = issue_token(form.user)
        logger.info(f"Issued API token for user {form.user.pk}")

        return JsonResponse({
            'success': True,
            'token': token,
            'user': {'id': form.user.pk, 'email': form.user.email},
        })

    except Exception as e:
        return error_response(e)
