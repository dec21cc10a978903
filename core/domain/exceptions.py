"""
Domain exceptions.

Domain exceptions represent business rule violations
and domain-specific error conditions.
"""
from typing import Any, Dict, Optional


class DomainException(Exception):
    """Base exception for all domain exceptions."""

    def __init__(self, message: str, code: str = None, details: Optional[Dict[str, Any]] = None):
        """
        Initialize domain exception.

        Args:
            message: Human-readable error message
            code: Machine-readable error code
            details: Extra fields returned alongside the error
        """
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}


class InvalidKeyRequestError(DomainException):
    """Raised when request input does not have the expected shape."""

    def __init__(self, message: str = "Invalid request"):
        super().__init__(message, code="VALIDATION_ERROR")


class UnauthorizedError(DomainException):
    """Raised when the shared secret is missing or wrong."""

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message, code="UNAUTHORIZED")


class KeyException(DomainException):
    """Base exception for access key errors."""

    pass


class KeyNotFoundError(KeyException):
    """Raised when no record matches the request."""

    def __init__(self, message: str = "Key not found"):
        super().__init__(message, code="KEY_NOT_FOUND")


class DuplicateActiveKeyError(KeyException):
    """Raised when a username already holds an active key."""

    def __init__(self, message: str, existing_key: Dict[str, Any]):
        super().__init__(
            message,
            code="DUPLICATE_ACTIVE_KEY",
            details={"existingKey": existing_key},
        )
        self.existing_key = existing_key


class KeyNotRenewableError(KeyException):
    """Raised when renewing a permanent key."""

    def __init__(self, message: str = "Permanent keys do not need renewal"):
        super().__init__(message, code="KEY_NOT_RENEWABLE")


class KeyAlreadyExpiredError(KeyException):
    """Raised when renewing a key whose expiry has passed."""

    def __init__(self, message: str = "Key has already expired and cannot be renewed"):
        super().__init__(message, code="KEY_ALREADY_EXPIRED")


class KeyTooCloseToExpiryError(KeyException):
    """Raised when less than one hour remains before expiry."""

    def __init__(self, remaining_minutes: int):
        super().__init__(
            "Keys can only be renewed with more than 1 hour remaining. "
            f"Remaining time: {remaining_minutes} minutes",
            code="KEY_TOO_CLOSE_TO_EXPIRY",
            details={"remainingMinutes": remaining_minutes},
        )
        self.remaining_minutes = remaining_minutes


class KeyStoreConflictError(KeyException):
    """Raised when concurrent writers kept winning until retries ran out."""

    def __init__(self, message: str = "Key store was modified concurrently, please retry"):
        super().__init__(message, code="KEY_STORE_CONFLICT")
