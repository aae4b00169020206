"""
Domain exceptions for the Apiary hive engine.

Purpose
-------
Define the structured exception hierarchy raised by services for programmer
errors (invalid arguments), missing reference data, configuration problems
and persistence failures.

Design Notes
------------
- All exceptions inherit from `ApiaryDomainException`.
- Each exception carries:
  - `message`: human-readable description
  - `details`: additional structured context (dict-like)
  - `severity`: `ErrorSeverity` value for logging/alerting
  - `is_retryable`: whether the operation can be retried
  - `error_code`: short, stable identifier for programmatic use
- Expected gameplay outcomes (mismatched user, locked room, full room) are
  NOT exceptions; services report them as ignored `OperationResult`s.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional


class ErrorSeverity(Enum):
    """Error severity levels for logging and alerting."""

    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ApiaryDomainException(Exception):
    """
    Base exception for all Apiary domain-level errors.

    Example:
        >>> raise ApiaryDomainException(
        ...     "Hatch failed",
        ...     {"species_id": "bee-worker"}
        ... )
    """

    DEFAULT_SEVERITY: ErrorSeverity = ErrorSeverity.ERROR
    DEFAULT_RETRYABLE: bool = False

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        severity: Optional[ErrorSeverity] = None,
        is_retryable: Optional[bool] = None,
        error_code: Optional[str] = None,
    ) -> None:
        self.message: str = message
        self.details: Dict[str, Any] = details or {}
        self.severity: ErrorSeverity = severity or self.DEFAULT_SEVERITY
        self.is_retryable: bool = (
            is_retryable if is_retryable is not None else self.DEFAULT_RETRYABLE
        )
        self.error_code: str = error_code or self.__class__.__name__
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
            "severity": self.severity.value,
            "is_retryable": self.is_retryable,
        }

    def __str__(self) -> str:
        details_str = f" | Details: {self.details}" if self.details else ""
        return f"[{self.error_code}] {self.message}{details_str}"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"details={self.details!r}, "
            f"severity={self.severity.value!r}, "
            f"is_retryable={self.is_retryable!r}"
            ")"
        )


class NotFoundError(ApiaryDomainException):
    """
    Raised when requested reference data cannot be found.

    Args:
        resource_type: Type of resource (e.g., "BeeSpecies", "RewardProfile")
        identifier: Optional identifier for the missing resource
    """

    DEFAULT_SEVERITY = ErrorSeverity.INFO

    def __init__(self, resource_type: str, identifier: Optional[Any] = None) -> None:
        self.resource_type = resource_type
        self.identifier = identifier

        if identifier is not None:
            message = f"{resource_type} not found: {identifier}"
        else:
            message = f"{resource_type} not found"

        super().__init__(
            message,
            details={"resource_type": resource_type, "identifier": identifier},
            error_code=f"{resource_type.upper()}_NOT_FOUND",
        )


class ValidationError(ApiaryDomainException):
    """
    Raised when an argument fails validation.

    Args:
        field: Name of the field that failed validation
        message: Explanation of why validation failed
    """

    DEFAULT_SEVERITY = ErrorSeverity.INFO

    def __init__(self, field: str, message: str) -> None:
        self.field = field
        self.validation_message = message
        super().__init__(
            f"Validation error for {field}: {message}",
            details={"field": field, "validation_message": message},
            error_code=f"VALIDATION_{field.upper()}",
        )


class ConfigurationError(ApiaryDomainException):
    """Raised when a required configuration key is missing or malformed."""

    DEFAULT_SEVERITY = ErrorSeverity.CRITICAL

    def __init__(self, key: str, message: str) -> None:
        self.key = key
        super().__init__(
            message,
            details={"config_key": key},
            error_code="CONFIGURATION_ERROR",
        )


class PersistenceError(ApiaryDomainException):
    """
    Raised by persistence adapters when a load or save fails.

    Args:
        operation: "load" or "save"
        key: Document key being accessed
        cause: Underlying exception
    """

    DEFAULT_SEVERITY = ErrorSeverity.WARNING
    DEFAULT_RETRYABLE = True

    def __init__(self, operation: str, key: str, cause: Optional[BaseException] = None) -> None:
        self.operation = operation
        self.key = key
        self.cause = cause
        reason = f": {cause}" if cause is not None else ""
        super().__init__(
            f"Persistence {operation} failed for '{key}'{reason}",
            details={
                "operation": operation,
                "key": key,
                "cause_type": type(cause).__name__ if cause is not None else None,
            },
            error_code=f"PERSISTENCE_{operation.upper()}_FAILED",
        )


def is_transient_error(exc: Exception) -> bool:
    """Check if an exception represents a transient, retryable error."""
    if isinstance(exc, ApiaryDomainException):
        return exc.is_retryable
    return False


def get_error_severity(exc: Exception) -> ErrorSeverity:
    """Get the severity level of an exception for logging."""
    if isinstance(exc, ApiaryDomainException):
        return exc.severity
    return ErrorSeverity.ERROR
