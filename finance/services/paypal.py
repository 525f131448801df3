"""
Thin PayPal REST client (Orders v2).

Only order creation, capture and webhook signature verification are
used; the rest of the portal never talks to the processor directly.
"""
import logging

import requests
from django.conf import settings

from core.exceptions import ExternalServiceError

logger = logging.getLogger(__name__)

LIVE_URL = 'https://api-m.paypal.com'
SANDBOX_URL = 'https://api-m.sandbox.paypal.com'


class CaptureDeclined(Exception):
    """The processor answered, and the answer is no."""

    def __init__(self, name, message, debug_id=None, details=None):
        self.name = name
        self.debug_id = debug_id
        self.details = details
        user_message = f"Payment failed: {name}"
        if details:
            user_message += f" - {details}"
        if debug_id:
            user_message += f" (Debug ID: {debug_id})"
        self.user_message = user_message
        super().__init__(message)


class PayPalClient:

    def __init__(self, client_id=None, secret=None, mode=None, timeout=None, session=None):
        self.client_id = client_id if client_id is not None else settings.PAYPAL_CLIENT_ID
        self.secret = secret if secret is not None else settings.PAYPAL_SECRET
        mode = mode or settings.PAYPAL_MODE
        self.base_url = LIVE_URL if mode == 'live' else SANDBOX_URL
        self.timeout = timeout or settings.PAYPAL_TIMEOUT
        self.session = session or requests.Session()

    # -----------------------------------------------------
    # Transport
    # -----------------------------------------------------

    def _request(self, method, path, **kwargs):
        url = f"{self.base_url}{path}"
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            logger.error(f"PayPal {method} {path} failed: {e}")
            raise ExternalServiceError('Payment processor unavailable')

        if response.status_code >= 500:
            logger.error(f"PayPal {method} {path} answered {response.status_code}")
            raise ExternalServiceError('Payment processor unavailable')
        return response

    def get_access_token(self):
        response = self._request(
            'POST', '/v1/oauth2/token',
            auth=(self.client_id, self.secret),
            data={'grant_type': 'client_credentials'},
            headers={'Accept': 'application/json'},
        )
        if not response.ok:
            logger.error(f"PayPal token request rejected: {response.status_code}")
            raise ExternalServiceError('Failed to get PayPal access token')
        return response.json()['access_token']

    def _authorized(self, method, path, **kwargs):
        token = self.get_access_token()
        headers = kwargs.pop('headers', {})
        headers.update({
            'Authorization': f'Bearer {token}',
            'Content-Type': 'application/json',
        })
        return self._request(method, path, headers=headers, **kwargs)

    # -----------------------------------------------------
    # Orders
    # -----------------------------------------------------

    def create_order(self, reference_id, description, amount, currency):
        """
        Returns the created order dict (id + approval links).
        """
        value = f"{amount:.2f}"
        body = {
            'intent': 'CAPTURE',
            'purchase_units': [{
                'reference_id': reference_id,
                'description': description,
                'amount': {
                    'currency_code': currency,
                    'value': value,
                    'breakdown': {
                        'item_total': {'currency_code': currency, 'value': value},
                    },
                },
            }],
            'application_context': {
                'return_url': settings.PAYMENT_RETURN_URL,
                'cancel_url': settings.PAYMENT_CANCEL_URL,
            },
        }
        response = self._authorized('POST', '/v2/checkout/orders', json=body)
        if not response.ok:
            logger.error(f"PayPal order creation failed: {response.text}")
            raise ExternalServiceError('Failed to create PayPal order')
        return response.json()

    def capture_order(self, order_id):
        """
        Returns the capture response dict.
        Raises CaptureDeclined when the processor refuses the capture.
        """
        response = self._authorized('POST', f'/v2/checkout/orders/{order_id}/capture')
        if not response.ok:
            try:
                error = response.json()
            except ValueError:
                error = {}
            details = (error.get('details') or [{}])[0].get('description')
            logger.warning(f"PayPal capture declined for {order_id}: {error.get('name')}")
            raise CaptureDeclined(
                name=error.get('name') or 'PAYMENT_FAILED',
                message=error.get('message') or 'Failed to capture payment',
                debug_id=error.get('debug_id'),
                details=details,
            )
        return response.json()

    # -----------------------------------------------------
    # Webhooks
    # -----------------------------------------------------

    def verify_webhook(self, headers, event):
        body = {
            'auth_algo': headers.get('PAYPAL-AUTH-ALGO'),
            'cert_url': headers.get('PAYPAL-CERT-URL'),
            'transmission_id': headers.get('PAYPAL-TRANSMISSION-ID'),
            'transmission_sig': headers.get('PAYPAL-TRANSMISSION-SIG'),
            'transmission_time': headers.get('PAYPAL-TRANSMISSION-TIME'),
            'webhook_id': settings.PAYPAL_WEBHOOK_ID,
            'webhook_event': event,
        }
        response = self._authorized(
            'POST', '/v1/notifications/verify-webhook-signature', json=body)
        if not response.ok:
            return False
        return response.json().get('verification_status') == 'SUCCESS'


def parse_capture(capture_data):
    """
    Extracts (capture_id, payer_email, payer_name) from a capture response.
    """
    units = capture_data.get('purchase_units') or [{}]
    captures = (units[0].get('payments') or {}).get('captures') or [{}]
    payer = capture_data.get('payer') or {}
    name = payer.get('name') or {}
    payer_name = f"{name.get('given_name', '')} {name.get('surname', '')}".strip()
    return captures[0].get('id', ''), payer.get('email_address', ''), payer_name


def get_client():
    return PayPalClient()
