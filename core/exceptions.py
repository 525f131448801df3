"""
Error taxonomy shared by every service in the portal.

Services raise these; the JSON views translate them into
`{"error": ..., "details": ..., "code": ...}` responses using the
status carried by the exception.
"""


class PortalError(Exception):
    status_code = 500
    code = 'error'
    default_message = 'Internal server error'

    def __init__(self, message=None, details=None, code=None):
        self.message = message or self.default_message
        self.details = details
        if code:
            self.code = code
        super().__init__(self.message)

    def as_dict(self):
        payload = {'error': self.message}
        if self.details is not None:
            payload['details'] = self.details
        if self.code != PortalError.code:
            payload['code'] = self.code
        return payload


class Unauthorized(PortalError):
    status_code = 401
    code = 'unauthorized'
    default_message = 'Unauthorized'


class Forbidden(PortalError):
    status_code = 403
    code = 'forbidden'
    default_message = 'Forbidden'


class NotFound(PortalError):
    status_code = 404
    code = 'not_found'
    default_message = 'Not found'


class InvalidState(PortalError):
    status_code = 400
    code = 'invalid_state'
    default_message = 'Operation not allowed in the current state'


class ValidationFailed(PortalError):
    status_code = 400
    code = 'validation_failed'
    default_message = 'Validation failed'


class IncompleteApplication(ValidationFailed):
    """
    Raised when a submission is attempted with missing items.
    `details` maps each form section to the labels still missing.
    """
    code = 'incomplete_application'
    default_message = 'Please complete all required fields, upload documents, and accept the declaration'


class IneligibleApplicant(ValidationFailed):
    status_code = 422
    code = 'INDIAN_CITIZEN_INELIGIBLE'
    default_message = 'You are not eligible to apply for this visa.'


class StorageError(PortalError):
    status_code = 500
    code = 'storage_error'
    default_message = 'Failed to store data'


class ExternalServiceError(PortalError):
    status_code = 502
    code = 'external_service_error'
    default_message = 'External service unavailable'
