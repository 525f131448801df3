"""
HTTP adapter for the portal's JSON API.
"""
import logging

import requests

logger = logging.getLogger(__name__)


class PortalClientError(Exception):
    """
    Any non-success answer (or transport failure, status 0).
    """

    def __init__(self, status, message, details=None, code=None):
        self.status = status
        self.message = message
        self.details = details
        self.code = code
        super().__init__(f"{status}: {message}")

    @property
    def is_retryable(self):
        return self.status == 0 or self.status >= 500


class PortalClient:

    def __init__(self, base_url, token=None, timeout=10, session=None):
        self.base_url = base_url.rstrip('/')
        self.token = token
        self.timeout = timeout
        self.session = session or requests.Session()

    @classmethod
    def login(cls, base_url, email, password, **kwargs):
        client = cls(base_url, **kwargs)
        data = client._request('POST', '/users/api/token/',
                               json={'email': email, 'password': password})
        client.token = data['token']
        return client

    def _request(self, method, path, **kwargs):
        headers = kwargs.pop('headers', {})
        if self.token:
            headers['Authorization'] = f'Bearer {self.token}'

        try:
            response = self.session.request(
                method, f"{self.base_url}{path}",
                headers=headers, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            logger.warning(f"{method} {path} failed: {e}")
            raise PortalClientError(0, 'Network error')

        try:
            data = response.json()
        except ValueError:
            data = {}

        if not response.ok:
            raise PortalClientError(
                response.status_code,
                data.get('error') or response.reason or 'Request failed',
                details=data.get('details'),
                code=data.get('code'),
            )
        return data

    # -----------------------------------------------------
    # Applications
    # -----------------------------------------------------

    def save_application(self, payload):
        return self._request('POST', '/visas/api/applications/save/', json=payload)['data']

    def submit_application(self, application_id):
        return self._request('POST', '/visas/api/applications/submit/',
                             json={'applicationId': str(application_id)})

    def get_application(self, application_id):
        return self._request('GET', f'/visas/api/applications/{application_id}/')['data']

    # -----------------------------------------------------
    # Payments & credits
    # -----------------------------------------------------

    def get_payment_status(self, order_id):
        """
        The mirrored payment status, or None while no row exists.
        """
        try:
            data = self._request('GET', f'/payments/api/payments/{order_id}/status/')
        except PortalClientError as e:
            if e.status == 404:
                return None
            raise
        return data['data']['status']

    def redeem_credit(self):
        return self._request('POST', '/payments/api/credits/redeem/')['data']
