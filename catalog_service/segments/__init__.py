"""Segment rule evaluation.

Parses human-written filter rules against a fixed field registry and
compiles them into typed predicates for the catalog repository.
"""

from catalog_service.segments.evaluator import (
    CompiledPredicate,
    Comparison,
    coerce_value,
    evaluate_rules,
    parse_rule,
)
from catalog_service.segments.registry import (
    DEFAULT_REGISTRY,
    OPERATORS,
    FieldRegistry,
    FieldType,
    Operator,
)

__all__ = [
    # Registry
    "DEFAULT_REGISTRY",
    "OPERATORS",
    "FieldRegistry",
    "FieldType",
    "Operator",
    # Evaluator
    "CompiledPredicate",
    "Comparison",
    "coerce_value",
    "evaluate_rules",
    "parse_rule",
]
