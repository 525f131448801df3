"""
Validation Gateway: the only writer of application form fields.

Writes are field-sparse (`UPDATE ... SET <given keys>`) and conditional on
the row still being a draft, so concurrent autosaves from the same user
interleave per field and can never touch a submitted application.
"""
import logging
import uuid

from django.db import DatabaseError, transaction
from django.utils import timezone

from core.exceptions import Forbidden, InvalidState, NotFound, StorageError, ValidationFailed
from core.services.audit import log_event
from ..forms import DraftPayloadForm
from ..models import VisaApplication

logger = logging.getLogger(__name__)


def parse_application_id(value):
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError, AttributeError):
        raise ValidationFailed(
            'Validation failed',
            details=[{'field': 'id', 'message': 'Invalid application id', 'code': 'invalid'}]
        )


def get_owned_application(user, application_id):
    application = VisaApplication.objects.filter(
        pk=parse_application_id(application_id)).first()
    if application is None:
        raise NotFound('Application not found')
    if application.user_id != user.pk:
        logger.warning(
            f"User {user.pk} tried to access application {application.id} owned by {application.user_id}")
        raise Forbidden('You do not have access to this application')
    return application


def get_owned_draft(user, application_id):
    application = get_owned_application(user, application_id)
    if application.status != 'draft' or application.is_locked:
        raise InvalidState('Cannot modify a submitted application')
    return application


def derive_full_name(current, changes):
    """
    `surname given_name` of the merged row, when a name part changed and
    the payload did not carry an explicit full name.
    """
    if 'full_name' in changes:
        return None
    if 'surname' not in changes and 'given_name' not in changes:
        return None

    surname = changes.get('surname', current.surname if current else '')
    given_name = changes.get('given_name', current.given_name if current else '')
    return ' '.join(part for part in (surname, given_name) if part)[:150]


def save_draft(user, payload):
    """
    Creates or sparsely updates the caller's draft.

    Args:
        user: authenticated owner.
        payload (dict): `{id?, email?, ...partial fields}`.

    Returns:
        VisaApplication: the canonical persisted row.
    """
    application_id = payload.get('id')
    creating = not application_id

    # 1. Load + ownership/state checks
    current = None if creating else get_owned_draft(user, application_id)

    # 2. Field shapes
    form = DraftPayloadForm(payload, creating=creating)
    if not form.is_valid():
        issues = form.issues()
        logger.info(f"Draft payload rejected for user {user.pk}: {len(issues)} issue(s)")
        raise ValidationFailed('Validation failed', details=issues)

    changes = form.sparse_update()
    full_name = derive_full_name(current, changes)
    if full_name is not None:
        changes['full_name'] = full_name

    # 3. Write
    if creating:
        return create_draft(user, changes)

    now = timezone.now()
    try:
        updated = VisaApplication.objects.filter(
            pk=current.pk, user=user, status='draft', is_locked=False
        ).update(
            status='draft',
            last_autosave_at=now,
            updated_at=now,
            **changes
        )
    except DatabaseError as e:
        logger.exception(f"Autosave failed for application {current.pk}: {e}")
        raise StorageError('Failed to update application')

    if not updated:
        # Submitted between the check and the write
        raise InvalidState('Cannot modify a submitted application')

    logger.info(
        f"Draft {current.pk} saved ({len(changes)} field(s)) by user {user.pk}")
    return VisaApplication.objects.get(pk=current.pk)


def create_draft(user, fields):
    """
    Inserts a new draft owned by `user`. Runs inside the caller's
    transaction when there is one (credit redemption relies on this).
    """
    now = timezone.now()
    try:
        with transaction.atomic():
            application = VisaApplication.objects.create(
                user=user,
                status='draft',
                last_autosave_at=now,
                **fields
            )
            log_event(
                'application_created', 'application', application.id, user=user,
                changes={'fields': sorted(fields)}
            )
    except DatabaseError as e:
        logger.exception(f"Draft creation failed for user {user.pk}: {e}")
        raise StorageError('Failed to create application')

    logger.info(f"Draft {application.id} created for user {user.pk}")
    return application
