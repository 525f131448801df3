"""
Bearer-token identity for the JSON API.

Tokens are signed user ids (django.core.signing) with a bounded age.
Every ownership check in the portal trusts the user resolved here.
"""
import logging
from functools import wraps

from django.conf import settings
from django.contrib.auth import get_user_model
from django.core import signing

from core.exceptions import Unauthorized
from core.http import error_response

logger = logging.getLogger(__name__)


def issue_token(user):
    return signing.dumps({'uid': user.pk}, salt=settings.API_TOKEN_SALT)


def resolve_bearer(request):
    """
    Returns the active user behind the request's Authorization header.
    Raises Unauthorized when the header is missing, malformed, expired or
    points to an unknown/inactive user.
    """
    header = request.headers.get('Authorization', '')
    if not header.startswith('Bearer '):
        raise Unauthorized('Unauthorized', details='No authorization header')

    token = header[len('Bearer '):].strip()
    if not token:
        raise Unauthorized('Unauthorized', details='Missing access token')

    try:
        payload = signing.loads(
            token,
            salt=settings.API_TOKEN_SALT,
            max_age=settings.API_TOKEN_MAX_AGE
        )
    except signing.SignatureExpired:
        raise Unauthorized('Unauthorized', details='Token expired')
    except signing.BadSignature:
        raise Unauthorized('Unauthorized', details='Invalid token')

    User = get_user_model()
    user = User.objects.filter(pk=payload.get('uid'), is_active=True).first()
    if user is None:
        raise Unauthorized('Unauthorized', details='Unknown user')
    return user


def bearer_required(view_func):
    """
    Decorator for API views: resolves the caller from the bearer token
    and stores it on request.user, or answers 401.
    """
    @wraps(view_func)
    def _wrapped(request, *args, **kwargs):
        try:
            request.user = resolve_bearer(request)
        except Unauthorized as e:
            logger.warning(f"Rejected API call to {request.path}: {e.details}")
            return error_response(e)
        return view_func(request, *args, **kwargs)

    return _wrapped
