"""Exception hierarchy for change-tracking errors.

All errors inherit from AuditableError, which carries a machine-readable
error_code alongside the human-readable message.
"""

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Stable identifiers for change-tracking failures."""

    NOT_AUDITED = "NOT_AUDITED"
    """The instance was not produced by make_auditable (or was released)."""

    INVALID_PROPERTY_REFERENCE = "INVALID_PROPERTY_REFERENCE"
    """A property reference did not resolve to a direct attribute read."""

    TYPE_MISMATCH = "TYPE_MISMATCH"
    """A recorded value cannot be viewed as the requested type."""

    INTERNAL_ERROR = "INTERNAL_ERROR"
    """An unexpected internal error occurred."""


class AuditableError(Exception):
    """Base exception for all change-tracking errors."""

    error_code: ErrorCode = ErrorCode.INTERNAL_ERROR

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class NotAuditedError(AuditableError):
    """Raised when an operation targets an instance the registry does not know."""

    error_code = ErrorCode.NOT_AUDITED

    def __init__(self, instance: Any) -> None:
        super().__init__(
            f"{type(instance).__name__} instance is not auditable; "
            "create it with AuditRegistry.make_auditable()"
        )
        self.instance = instance


class InvalidPropertyReferenceError(AuditableError, ValueError):
    """Raised when a property reference is not a direct attribute read."""

    error_code = ErrorCode.INVALID_PROPERTY_REFERENCE

    def __init__(self, reference: Any, reason: str) -> None:
        super().__init__(f"Invalid property reference {reference!r}: {reason}")
        self.reference = reference


class TypeMismatchError(AuditableError, TypeError):
    """Raised when a recorded value is not assignable to the requested type."""

    error_code = ErrorCode.TYPE_MISMATCH

    def __init__(self, property_name: str, expected_type: Any, value: Any) -> None:
        expected = getattr(expected_type, "__name__", repr(expected_type))
        super().__init__(
            f"Recorded value {value!r} for '{property_name}' "
            f"is not a valid {expected}"
        )
        self.property_name = property_name
        self.expected_type = expected_type
        self.value = value
