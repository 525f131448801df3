import logging
from io import BytesIO

from django.conf import settings
from django.template.loader import render_to_string
from xhtml2pdf import pisa

from core.exceptions import StorageError

logger = logging.getLogger(__name__)


def render_receipt_html(payment):
    return render_to_string('finance/pdf/receipt.html', {
        'payment': payment,
        'booking': payment.booking,
        'travelers': list(payment.booking.travelers.all()) if payment.booking_id else [],
        'transaction_id': payment.paypal_capture_id or payment.paypal_order_id,
        'customer_name': payment.payer_name or payment.user.display_name,
        'site_url': settings.SITE_URL,
    })


def render_receipt_pdf(payment):
    """
    Returns the receipt of a completed payment as PDF bytes.
    """
    html_string = render_receipt_html(payment)
    buffer = BytesIO()
    pisa_status = pisa.CreatePDF(html_string, dest=buffer)

    if pisa_status.err:
        logger.error(f"Receipt rendering failed for payment {payment.id}")
        raise StorageError('Failed to generate receipt')

    return buffer.getvalue()
