class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class SchedulingConflictError(ValidationError):
    """Raised when a drive would double-book a location on the same day."""


class InvalidTransitionError(ValidationError):
    """Raised when a drive status change is not allowed from its current state."""


class NotFoundError(DomainError):
    """Raised when a record does not exist or is not owned by the caller."""


class AuthenticationError(DomainError):
    """Raised when credentials or tokens are missing, invalid or expired."""
