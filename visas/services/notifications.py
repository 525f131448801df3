import logging

from django.conf import settings
from django.core.mail import EmailMultiAlternatives
from django.template.loader import render_to_string
from django.utils.html import strip_tags

from ..schema import FIELDS, SECTIONS

logger = logging.getLogger(__name__)


def _send(subject, template, context, recipients):
    html_content = render_to_string(template, context)
    text_content = strip_tags(html_content)

    for email in recipients:
        try:
            msg = EmailMultiAlternatives(
                subject=subject,
                body=text_content,
                from_email=settings.DEFAULT_FROM_EMAIL,
                to=[email],
            )
            msg.attach_alternative(html_content, "text/html")
            msg.send()
            logger.info(f"notification was sent to: {email}")
        except Exception as e:
            logger.error(f"Email '{subject}' failed for {email}: {e}")


def _application_sections(application):
    """Filled-in fields grouped by section, for the staff alert."""
    sections = []
    for key, title in SECTIONS.items():
        rows = []
        for spec in FIELDS:
            if spec.section != key:
                continue
            value = getattr(application, spec.name)
            if value in (None, '', []):
                continue
            if isinstance(value, bool):
                value = 'Yes' if value else 'No'
            elif isinstance(value, list):
                value = ', '.join(value)
            rows.append((spec.label, value))
        if rows:
            sections.append({'title': title, 'rows': rows})
    return sections


def notify_application_submitted(application):
    """
    Confirmation to the applicant + full alert to staff.
    """
    context = {
        'application': application,
        'applicant_name': application.full_name or application.surname,
        'reference': str(application.id)[:8].upper(),
        'submitted_at': application.submitted_at,
    }

    _send(
        subject=f"Application Received: {context['reference']}",
        template='emails/application_submitted.html',
        context=context,
        recipients=[application.email],
    )

    staff_context = dict(context, sections=_application_sections(application))
    _send(
        subject=f"New Visa Application: {context['applicant_name']} ({context['reference']})",
        template='emails/application_staff_alert.html',
        context=staff_context,
        recipients=settings.STAFF_NOTIFICATION_EMAILS,
    )


def notify_status_change(application, old_status):
    """
    Tells the applicant an administrator moved their application.
    """
    context = {
        'applicant_name': application.full_name or application.surname,
        'reference': str(application.id)[:8].upper(),
        'old_status': old_status.replace('_', ' ').capitalize(),
        'new_status': application.get_status_display(),
        'admin_notes': application.admin_notes,
        'updated_at': application.updated_at,
    }

    _send(
        subject=f"Application Status Update: {context['reference']}",
        template='emails/application_status_update.html',
        context=context,
        recipients=[application.email],
    )
