"""Custom domain exceptions for the application."""

# Stable, machine-readable error codes for API consumers.
NOT_FOUND = "NOT_FOUND"
DUPLICATE_RESOURCE = "DUPLICATE_RESOURCE"
VALIDATION_ERROR = "VALIDATION_ERROR"
FORBIDDEN = "FORBIDDEN"
UNAUTHORIZED = "UNAUTHORIZED"
INVALID_STATE = "INVALID_STATE"
CONCURRENT_MODIFICATION = "CONCURRENT_MODIFICATION"


class DomainError(Exception):
    """Base exception for domain/business logic errors."""

    pass


class NotFoundError(DomainError):
    """Raised when a requested resource does not exist."""

    pass


class DuplicateResourceError(DomainError):
    """Raised when attempting to create or update a resource that would violate a uniqueness constraint."""

    pass


class DomainValidationError(DomainError):
    """Raised when business rules or domain validation fail (e.g. invalid dates, missing required fields)."""

    pass


class UnauthorizedError(DomainError):
    """Raised when no acting user can be resolved for the operation."""

    pass


class ForbiddenError(DomainError):
    """Raised when the acting user has no rights over the target resource."""

    pass


class InvalidStateError(DomainError):
    """Raised when the target resource is in a state that does not allow the operation."""

    pass


class ConcurrentModificationError(DomainError):
    """Raised when a row was changed by someone else between read and write."""

    pass
