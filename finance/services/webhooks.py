import logging

from django.conf import settings

from core.exceptions import NotFound, Unauthorized
from core.services.audit import log_event
from .paypal import get_client
from .payments import complete_payment, mark_failed, mark_pending, refund_payment

logger = logging.getLogger(__name__)


def _related_order_id(resource):
    related = (resource.get('supplementary_data') or {}).get('related_ids') or {}
    return related.get('order_id')


def handle_event(event, headers, client=None):
    """
    Applies one processor webhook event. Unknown events and events for
    unknown orders are acknowledged and logged.
    Returns a short description of what was done.
    """
    if settings.PAYPAL_VERIFY_WEBHOOKS:
        client = client or get_client()
        if not client.verify_webhook(headers, event):
            logger.warning(f"Rejected webhook {event.get('id')}: bad signature")
            raise Unauthorized('Invalid webhook signature')

    event_type = event.get('event_type', '')
    resource = event.get('resource') or {}

    log_event('webhook_received', 'webhook', event.get('id') or '-',
              changes={'event_type': event_type, 'resource_id': resource.get('id')})

    try:
        if event_type == 'CHECKOUT.ORDER.APPROVED':
            mark_pending(resource.get('id'))
            return 'pending'

        if event_type == 'PAYMENT.CAPTURE.COMPLETED':
            payer = resource.get('payer') or {}
            complete_payment(
                _related_order_id(resource),
                capture_id=resource.get('id', ''),
                payer_email=payer.get('email_address', ''),
            )
            return 'completed'

        if event_type in ('PAYMENT.CAPTURE.DENIED', 'PAYMENT.CAPTURE.DECLINED'):
            mark_failed(_related_order_id(resource), reason=event_type)
            return 'failed'

        if event_type == 'PAYMENT.CAPTURE.REFUNDED':
            refund_payment(_related_order_id(resource), reason='Refunded at processor')
            return 'refunded'

    except NotFound:
        logger.warning(
            f"Webhook {event_type} for unknown order (resource {resource.get('id')}), ignored")
        return 'ignored'

    logger.info(f"Webhook {event_type} acknowledged without action")
    return 'ignored'
