"""Segment rule evaluator.

Turns an ordered list of rule strings such as ``"price >= 100"`` into a
CompiledPredicate: one typed comparison per field, combined with AND by
the storage layer.

Evaluation is a pure function of the rules and the field registry. Rules
are processed in order and the first invalid rule aborts the whole
evaluation, so callers never see a partial predicate.

Example usage:
    predicate = evaluate_rules(["price > 100", "on_sale = true"])
    predicate["price"]   # Comparison(field="price", operator=Operator.GT, value=100.0)
"""

import math
import re
from collections.abc import Iterator
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from catalog_service.domain.exceptions import (
    InvalidBooleanError,
    InvalidDateError,
    InvalidNumberError,
    InvalidRequestError,
    MalformedRuleError,
    UnknownFieldError,
    UnknownOperatorError,
    UnsupportedFieldTypeError,
)
from catalog_service.segments.registry import (
    DEFAULT_REGISTRY,
    FieldRegistry,
    FieldType,
    Operator,
)

# Plain decimal notation only: no "100abc", "nan", "inf" or "1_000".
_NUMBER_PATTERN = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?", re.ASCII)

# DD-MM-YYYY
_DATE_PATTERN = re.compile(r"(\d{1,2})-(\d{1,2})-(\d{4})", re.ASCII)

_BOOLEANS = {"true": True, "false": False}


@dataclass(frozen=True)
class Comparison:
    """A single typed constraint on one field.

    Attributes:
        field: Registered field name.
        operator: Comparison operator.
        value: Operand coerced to the field's declared type.
    """

    field: str
    operator: Operator
    value: Any

    def describe(self) -> str:
        """Render the comparison back into rule-like text."""
        value = self.value
        if isinstance(value, bool):
            value = "true" if value else "false"
        elif isinstance(value, datetime):
            value = value.strftime("%d-%m-%Y")
        return f"{self.field} {self.operator.value} {value}"


@dataclass
class CompiledPredicate:
    """Conjunction of per-field comparisons.

    Holds at most one comparison per field: adding a second comparison
    for the same field replaces the first. An empty predicate matches
    every product.
    """

    comparisons: dict[str, Comparison] = field(default_factory=dict)

    def add(self, comparison: Comparison) -> None:
        """Add a comparison, replacing any earlier one on the same field."""
        self.comparisons[comparison.field] = comparison

    def __getitem__(self, name: str) -> Comparison:
        return self.comparisons[name]

    def __contains__(self, name: object) -> bool:
        return name in self.comparisons

    def __iter__(self) -> Iterator[Comparison]:
        return iter(self.comparisons.values())

    def __len__(self) -> int:
        return len(self.comparisons)

    @property
    def matches_all(self) -> bool:
        """Whether the predicate places no constraint at all."""
        return not self.comparisons

    def describe(self) -> list[str]:
        """Render every comparison as rule-like text."""
        return [c.describe() for c in self]


# ============================================================================
# Value Coercion
# ============================================================================


def parse_number(raw: str, field_name: str, rule: str) -> float:
    """Parse a strict decimal number."""
    if not _NUMBER_PATTERN.fullmatch(raw):
        raise InvalidNumberError(raw, field_name, rule)
    value = float(raw)
    if not math.isfinite(value):
        raise InvalidNumberError(raw, field_name, rule)
    return value


def parse_date(raw: str, field_name: str, rule: str) -> datetime:
    """Parse ``DD-MM-YYYY`` into a naive datetime at local midnight."""
    match = _DATE_PATTERN.fullmatch(raw)
    if match is None:
        raise InvalidDateError(raw, field_name, rule)
    day, month, year = (int(part) for part in match.groups())
    try:
        return datetime(year, month, day)
    except ValueError:
        raise InvalidDateError(raw, field_name, rule) from None


def parse_boolean(raw: str, field_name: str, rule: str) -> bool:
    """Accept exactly ``true`` or ``false``."""
    try:
        return _BOOLEANS[raw]
    except KeyError:
        raise InvalidBooleanError(raw, field_name, rule) from None


def coerce_value(raw: str, field_name: str, field_type: str, rule: str) -> Any:
    """Coerce a raw value token to the field's declared type.

    Args:
        raw: Value token from the rule.
        field_name: Field the value belongs to.
        field_type: Declared type from the registry.
        rule: Original rule text, for error context.

    Returns:
        float, datetime, bool or str depending on the field type.

    Raises:
        InvalidNumberError, InvalidDateError, InvalidBooleanError: When
            the token does not parse as the declared type.
        UnsupportedFieldTypeError: When the declared type is unknown.
    """
    if field_type == FieldType.NUMBER:
        return parse_number(raw, field_name, rule)
    if field_type == FieldType.DATE:
        return parse_date(raw, field_name, rule)
    if field_type == FieldType.BOOLEAN:
        return parse_boolean(raw, field_name, rule)
    if field_type == FieldType.STRING:
        return raw
    raise UnsupportedFieldTypeError(field_name, field_type)


# ============================================================================
# Rule Parsing
# ============================================================================


def parse_rule(rule: str, registry: FieldRegistry = DEFAULT_REGISTRY) -> Comparison:
    """Parse and validate a single rule.

    Args:
        rule: Rule text of the form ``<field> <operator> <value>``.
        registry: Field registry to validate against.

    Returns:
        The typed comparison described by the rule.

    Raises:
        MalformedRuleError: Rule does not have exactly three tokens.
        UnknownFieldError: Field is not registered.
        UnknownOperatorError: Operator is not supported.
        InvalidValueError: Value does not match the field type.
    """
    tokens = rule.split()
    if len(tokens) != 3:
        raise MalformedRuleError(rule, len(tokens))

    field_name, operator_token, raw_value = tokens

    field_type = registry.type_of(field_name)
    if field_type is None:
        raise UnknownFieldError(field_name, rule)

    try:
        operator = Operator(operator_token)
    except ValueError:
        raise UnknownOperatorError(operator_token, rule) from None

    value = coerce_value(raw_value, field_name, field_type, rule)
    return Comparison(field=field_name, operator=operator, value=value)


def evaluate_rules(
    rules: Any,
    registry: FieldRegistry = DEFAULT_REGISTRY,
) -> CompiledPredicate:
    """Compile an ordered list of rules into a single predicate.

    When several rules name the same field, the last one wins.

    Args:
        rules: List of rule strings, as received from the client.
        registry: Field registry to validate against.

    Returns:
        Compiled predicate; empty when ``rules`` is empty.

    Raises:
        InvalidRequestError: ``rules`` is missing, not a list, or holds
            a non-string entry.
        SegmentRuleError: The first invalid rule, in input order.
    """
    if rules is None or not isinstance(rules, (list, tuple)):
        raise InvalidRequestError("Rules must be an array")

    predicate = CompiledPredicate()
    for index, rule in enumerate(rules):
        if not isinstance(rule, str):
            raise InvalidRequestError("Each rule must be a string", index=index)
        predicate.add(parse_rule(rule, registry))
    return predicate
