class DomainError(Exception):
    """Base exception for business rule violations."""

    transient = False


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules.

    Shown to caregivers as a short-lived message.
    """

    transient = True


class StoreError(DomainError):
    """Raised when reading or writing the underlying store fails."""


class NotFoundError(DomainError):
    """Raised when a record addressed by id does not exist."""