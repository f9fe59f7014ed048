"""Domain-level exceptions.

Services raise these errors to express business rule violations.
Route handlers catch them and map to appropriate HTTP status codes.
"""


class DomainError(Exception):
    """Base class for all domain errors."""


class DuplicateError(DomainError):
    """Entity with the same unique key already exists."""


class ValidationError(DomainError):
    """Input violates a business validation rule."""

    def __init__(self, message: str, field: str | None = None):
        self.field = field
        super().__init__(message)


class InvalidCredentialsError(DomainError):
    """Email unknown or password mismatch. Same message for both."""


class NotVerifiedError(DomainError):
    """Account exists but its email address has not been verified."""


class UnknownAccountError(DomainError):
    """No account is associated with the given email address."""


class InvalidOrExpiredTokenError(DomainError):
    """Reset or verification token is unknown, already used, or expired."""


class DeliveryError(DomainError):
    """Transactional email could not be handed to the mail relay."""


class PersistenceError(DomainError):
    """The backing store failed to read or write."""


class SigningError(DomainError):
    """Session token could not be signed."""
