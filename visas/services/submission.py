import logging

from django.db import transaction
from django.utils import timezone

from core.exceptions import (
    Forbidden, IncompleteApplication, IneligibleApplicant, InvalidState, NotFound
)
from core.services.audit import log_event
from finance.models import Payment
from ..eligibility import check_application
from ..models import ApplicationSnapshot, VisaApplication
from ..schema import missing_items
from ..serializers import application_values, serialize_application
from .documents import signed_urls, uploaded_document_types
from .drafts import parse_application_id
from .notifications import notify_application_submitted

logger = logging.getLogger(__name__)


def check_completeness(application):
    """
    Raises IncompleteApplication (missing labels grouped by section) or
    IneligibleApplicant. Returns None when the draft may be submitted.
    """
    values = application_values(application)
    missing = missing_items(values, uploaded_document_types(application.id))
    if missing:
        raise IncompleteApplication(
            details=[
                {'section': section, 'missing': labels}
                for section, labels in missing.items()
            ]
        )

    eligible, reason = check_application(values)
    if not eligible:
        raise IneligibleApplicant(reason)


def funding_payment(application):
    return (
        Payment.objects
        .filter(application=application, status='completed')
        .select_related('booking')
        .order_by('-captured_at', '-created_at')
        .first()
    )


def submit_application(user, application_id):
    """
    draft -> submitted, exactly once.

    The row is locked, re-checked and then moved with a conditional
    update on `status='draft'`, so of two concurrent submits only one
    can win. Notifications go out after the commit and never undo it.
    """
    application_id = parse_application_id(application_id)

    with transaction.atomic():
        # 1. Lock the row
        application = (
            VisaApplication.objects.select_for_update()
            .filter(pk=application_id).first()
        )
        if application is None:
            raise NotFound('Application not found')

        # 2. Ownership + lifecycle
        if application.user_id != user.pk:
            logger.warning(
                f"User {user.pk} tried to submit application {application.id} owned by {application.user_id}")
            raise Forbidden('You do not have access to this application')
        if application.status != 'draft' or application.is_locked:
            raise InvalidState('Application has already been submitted')

        # 3. Preconditions
        check_completeness(application)

        # 4. Transition
        now = timezone.now()
        updated = VisaApplication.objects.filter(
            pk=application.pk, status='draft'
        ).update(
            status='submitted',
            is_locked=True,
            submitted_at=now,
            updated_at=now,
        )
        if updated != 1:
            raise InvalidState('Application has already been submitted')

        application.refresh_from_db()

        # 5. Snapshot (what was submitted, and what paid for it)
        payment = funding_payment(application)
        ApplicationSnapshot.objects.create(
            application=application,
            snapshot_data=serialize_application(application),
            document_urls=signed_urls(application.id),
            payment=payment,
            booking=payment.booking if payment else None,
            submitted_at=now,
            submitted_by=user,
        )

        log_event(
            'application_submitted', 'application', application.id, user=user,
            changes={
                'status': ['draft', 'submitted'],
                'payment_id': str(payment.id) if payment else None,
            }
        )

    logger.info(f"Application {application.id} submitted by user {user.pk}")

    # === NOTIFY OUTSIDE THE TRANSACTION ===
    try:
        notify_application_submitted(application)
    except Exception as e:
        logger.error(
            f"Submission notification failed for application {application.id}: {e}")

    return application
