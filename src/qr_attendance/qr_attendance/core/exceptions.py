class DomainError(Exception):
    """Base exception for business rule violations."""

    status_code = 400


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class TokenError(ValidationError):
    """Raised when a QR token is missing, unknown or expired."""


class AuthenticationError(DomainError):
    """Raised when login credentials are invalid."""

    status_code = 401


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""

    status_code = 403


class NotFoundError(DomainError):
    """Raised when a referenced user or record does not exist."""

    status_code = 404


class NotificationError(DomainError):
    """Raised by notifier adapters when a message cannot be delivered.

    Never surfaced to API callers; the dispatcher logs it.
    """

    status_code = 500
