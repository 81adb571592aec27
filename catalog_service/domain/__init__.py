"""Domain layer - error taxonomy shared by every layer.

Example usage:
    from catalog_service.domain import SegmentRuleError

    try:
        evaluate_rules(rules)
    except SegmentRuleError as e:
        print(e.error, e.message)
"""

from catalog_service.domain.exceptions import (
    DomainError,
    IngestionError,
    InvalidBooleanError,
    InvalidDateError,
    InvalidNumberError,
    InvalidRequestError,
    InvalidValueError,
    MalformedRuleError,
    SegmentRuleError,
    StorageError,
    StorageTimeoutError,
    UnknownFieldError,
    UnknownOperatorError,
    UnsupportedFieldTypeError,
    UpstreamFetchError,
    UpstreamTimeoutError,
)

__all__ = [
    "DomainError",
    # Rule validation
    "SegmentRuleError",
    "InvalidRequestError",
    "MalformedRuleError",
    "UnknownFieldError",
    "UnknownOperatorError",
    "InvalidValueError",
    "InvalidNumberError",
    "InvalidDateError",
    "InvalidBooleanError",
    "UnsupportedFieldTypeError",
    # Ingestion
    "IngestionError",
    "UpstreamFetchError",
    "UpstreamTimeoutError",
    # Storage
    "StorageError",
    "StorageTimeoutError",
]
