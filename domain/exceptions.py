"""Domain exceptions for business rule violations."""


class DomainError(Exception):
    """Base exception for domain layer."""


class ValidationError(DomainError):
    """Raised when input validation fails."""


class ObjectNotFoundError(DomainError):
    """Raised when no stored object exists under the requested key."""


class InfrastructureError(DomainError):
    """Raised when infrastructure operations fail (object store, network, etc.)."""
