import logging

from django.conf import settings
from django.core.mail import EmailMultiAlternatives
from django.template.loader import render_to_string
from django.utils.html import strip_tags

from .receipt import render_receipt_pdf

logger = logging.getLogger(__name__)


def _payment_context(payment):
    return {
        'customer_name': payment.payer_name or payment.user.display_name,
        'customer_email': payment.payer_email or payment.user.email,
        'amount': "{:,.2f}".format(payment.total_amount),
        'currency': payment.currency,
        'service_name': payment.service_name,
        'order_id': payment.paypal_order_id,
        'transaction_id': payment.paypal_capture_id or payment.paypal_order_id,
        'captured_at': payment.captured_at,
        'application_id': payment.application_id,
        'booking_id': payment.booking_id,
        'has_credit': payment.credit_state == 'available',
    }


def send_payment_thank_you(payment):
    """
    Thank-you email with the PDF receipt attached.
    Returns True when the email went out.
    """
    context = _payment_context(payment)
    subject = f"Payment Confirmed: {context['transaction_id']}"

    html_content = render_to_string('emails/payment_thank_you.html', context)
    text_content = strip_tags(html_content)

    try:
        receipt_pdf = render_receipt_pdf(payment)
    except Exception as e:
        logger.error(f"Receipt attachment failed for payment {payment.id}: {e}")
        receipt_pdf = None

    try:
        msg = EmailMultiAlternatives(
            subject=subject,
            body=text_content,
            from_email=settings.DEFAULT_FROM_EMAIL,
            to=[context['customer_email']],
        )
        msg.attach_alternative(html_content, "text/html")
        if receipt_pdf:
            msg.attach(
                f"Receipt_{payment.paypal_order_id}.pdf",
                receipt_pdf,
                "application/pdf"
            )
        msg.send()
        logger.info(f"notification was sent to: {context['customer_email']}")
        return True
    except Exception as e:
        logger.error(f"Thank-you email failed for {context['customer_email']}: {e}")
        return False


def notify_staff_payment(payment):
    context = _payment_context(payment)
    subject = f"Payment Captured: {context['amount']} {context['currency']}"

    html_content = render_to_string('emails/payment_staff_alert.html', context)
    text_content = strip_tags(html_content)

    for email in settings.STAFF_NOTIFICATION_EMAILS:
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
            logger.error(f"Staff payment alert failed for {email}: {e}")


def notify_payment_captured(payment):
    sent = send_payment_thank_you(payment)
    notify_staff_payment(payment)
    return sent
