"""Domain exceptions.

All errors raised by the segment evaluator, the ingestion collector and
the storage layer. The API layer maps each family to an HTTP status:
rule validation errors are client errors, upstream and storage errors
are server errors.
"""

from typing import Any


class DomainError(Exception):
    """Base class for all domain exceptions.

    All domain errors should inherit from this class to allow
    catching domain-specific errors at the application layer.
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """Initialize domain error.

        Args:
            message: Human-readable error message.
            details: Optional dictionary with additional error context.
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}


# ============================================================================
# Segment Rule Errors
# ============================================================================


class SegmentRuleError(DomainError):
    """Base class for rule validation errors.

    Attributes:
        error: Short machine-friendly label returned as the ``error``
            field of the API error envelope.
    """

    error = "Invalid rule"

    def __init__(
        self,
        message: str,
        error: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details=details)
        if error is not None:
            self.error = error


class InvalidRequestError(SegmentRuleError):
    """Raised when the top-level rules argument is missing or malformed."""

    def __init__(self, reason: str, index: int | None = None) -> None:
        """Initialize invalid request error.

        Args:
            reason: What is wrong with the request.
            index: Position of the offending rule, if any.
        """
        details: dict[str, Any] = {"reason": reason}
        if index is not None:
            details["index"] = index
        super().__init__(reason, error=reason, details=details)


class MalformedRuleError(SegmentRuleError):
    """Raised when a rule does not split into exactly three tokens."""

    def __init__(self, rule: str, token_count: int) -> None:
        super().__init__(
            f"Malformed rule '{rule}': expected '<field> <operator> <value>', "
            f"got {token_count} token(s)",
            error="Malformed rule",
            details={"rule": rule, "token_count": token_count},
        )


class UnknownFieldError(SegmentRuleError):
    """Raised when a rule references a field missing from the registry."""

    def __init__(self, field: str, rule: str) -> None:
        super().__init__(
            f"Invalid field '{field}' in rule '{rule}'",
            error=f"Invalid field '{field}'",
            details={"field": field, "rule": rule},
        )


class UnknownOperatorError(SegmentRuleError):
    """Raised when a rule uses an operator outside the supported set."""

    def __init__(self, operator: str, rule: str) -> None:
        super().__init__(
            f"Invalid operator '{operator}' in rule '{rule}'",
            error=f"Invalid operator '{operator}'",
            details={"operator": operator, "rule": rule},
        )


class InvalidValueError(SegmentRuleError):
    """Base class for value coercion failures."""

    kind = "value"

    def __init__(self, value: str, field: str, rule: str) -> None:
        """Initialize invalid value error.

        Args:
            value: The raw value token that failed coercion.
            field: Field the value was coerced for.
            rule: Original rule text.
        """
        super().__init__(
            f"Invalid {self.kind} value '{value}' for field '{field}'",
            error=f"Invalid {self.kind}",
            details={"value": value, "field": field, "rule": rule},
        )


class InvalidNumberError(InvalidValueError):
    """Raised when a number field value is not a decimal number."""

    kind = "number"


class InvalidDateError(InvalidValueError):
    """Raised when a date field value is not a real DD-MM-YYYY date."""

    kind = "date"


class InvalidBooleanError(InvalidValueError):
    """Raised when a boolean field value is not ``true`` or ``false``."""

    kind = "boolean"


class UnsupportedFieldTypeError(SegmentRuleError):
    """Raised when the registry declares a type the evaluator cannot coerce."""

    def __init__(self, field: str, field_type: str) -> None:
        super().__init__(
            f"Unsupported field type '{field_type}'",
            error="Field type not supported",
            details={"field": field, "field_type": field_type},
        )


# ============================================================================
# Ingestion Errors
# ============================================================================


class IngestionError(DomainError):
    """Base class for ingestion errors."""

    pass


class UpstreamFetchError(IngestionError):
    """Raised when the upstream catalog cannot be fetched or understood."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize upstream fetch error.

        Args:
            message: Human-readable error message.
            status_code: Upstream HTTP status, when a response was received.
            details: Optional additional error context.
        """
        merged = dict(details or {})
        if status_code is not None:
            merged["status_code"] = status_code
        super().__init__(message, details=merged)
        self.status_code = status_code


class UpstreamTimeoutError(UpstreamFetchError):
    """Raised when the upstream catalog does not answer in time."""

    def __init__(self, timeout: float) -> None:
        super().__init__(
            f"Upstream catalog did not respond within {timeout}s",
            details={"timeout": timeout},
        )
        self.timeout = timeout


# ============================================================================
# Storage Errors
# ============================================================================


class StorageError(DomainError):
    """Raised when a storage query or write fails."""

    def __init__(self, operation: str, reason: str) -> None:
        """Initialize storage error.

        Args:
            operation: Storage operation that failed (e.g. "upsert").
            reason: Underlying failure description.
        """
        super().__init__(
            f"Storage operation '{operation}' failed: {reason}",
            details={"operation": operation, "reason": reason},
        )
        self.operation = operation


class StorageTimeoutError(StorageError):
    """Raised when a storage operation exceeds its timeout."""

    def __init__(self, operation: str, timeout: float) -> None:
        super().__init__(operation, f"timed out after {timeout}s")
        self.timeout = timeout
