"""Custom domain exceptions for the application."""

# Stable, machine-readable error codes for API consumers.
DUPLICATE_EMAIL = "DUPLICATE_EMAIL"
UNKNOWN_EMAIL = "UNKNOWN_EMAIL"
INVALID_PASSWORD = "INVALID_PASSWORD"
CORRUPT_CREDENTIAL = "CORRUPT_CREDENTIAL"
INVALID_OR_EXPIRED_TOKEN = "INVALID_OR_EXPIRED_TOKEN"
UPDATE_FAILED = "UPDATE_FAILED"
SESSION_STORE_FAILURE = "SESSION_STORE_FAILURE"
STORE_UNAVAILABLE = "STORE_UNAVAILABLE"
VALIDATION_ERROR = "VALIDATION_ERROR"
INTERNAL_ERROR = "INTERNAL_ERROR"


class DomainError(Exception):
    """Base exception for domain/business logic errors."""

    pass


class DuplicateEmailError(DomainError):
    """Raised when registering an email that already belongs to a user."""

    pass


class UnknownEmailError(DomainError):
    """Raised when no user is registered under the given email."""

    pass


class InvalidPasswordError(DomainError):
    """Raised when a password does not match the stored hash."""

    pass


class CorruptCredentialError(DomainError):
    """Raised when a stored password hash is missing or unreadable (server-side fault)."""

    pass


class InvalidOrExpiredTokenError(DomainError):
    """Raised when a reset token is malformed, unknown, consumed or expired."""

    pass


class UpdateFailedError(DomainError):
    """Raised when a guarded write affected no rows (e.g. token consumed concurrently)."""

    pass


class SessionStoreFailureError(DomainError):
    """Raised when the session store cannot complete an operation."""

    pass


class StoreUnavailableError(DomainError):
    """Raised when the credential store cannot be reached or a query fails."""

    pass


class DomainValidationError(DomainError):
    """Raised when business rules or input validation fail (e.g. password too short)."""

    pass
