class AppException(Exception):
    """Base application exception."""

    status_code = 500
    default_detail = "Request failed"

    def __init__(self, message: str = "", detail: str = ""):
        super().__init__(message or self.default_detail)
        # Safe, user-facing text. The exception message may carry internal detail.
        self.detail = detail or self.default_detail


class Unauthorized(AppException):
    """Missing or invalid identity."""

    status_code = 401
    default_detail = "Not authenticated"


class NotFoundError(AppException):
    """Resource not found exception."""

    status_code = 404
    default_detail = "Not found"


class NotProvisioned(AppException):
    """User has no payment customer record."""

    status_code = 409
    default_detail = "Billing is not set up for this account"


class InvalidOperation(AppException):
    """Operation is not allowed in the current state."""

    status_code = 400
    default_detail = "Invalid operation"


class InvalidSignature(AppException):
    """Webhook authenticity check failed."""

    status_code = 400
    default_detail = "Invalid webhook signature"


class ProviderUnavailable(AppException):
    """Transient failure talking to the payment provider."""

    status_code = 503
    default_detail = "Payment provider unavailable, please retry"
