class BillingError(Exception):
    """Base class for errors that map onto a client-facing response."""

    status = 400

    def __init__(self, message, details=None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ValidationError(BillingError):
    status = 400


class NotFoundError(BillingError):
    status = 404


class ConflictError(BillingError):
    """Duplicate unique field, insufficient stock, or a retryable race."""

    status = 409


class UpstreamError(BillingError):
    status = 502
