"""Filterable field registry and operator set.

The registry is plain data built once at import time. The evaluator
only ever consults it; nothing inspects the database schema.
"""

import operator as _op
from collections.abc import Iterator, Mapping
from enum import Enum
from types import MappingProxyType
from typing import Any, Callable


class FieldType(str, Enum):
    """Declared value type of a filterable field."""

    NUMBER = "number"
    STRING = "string"
    DATE = "date"
    BOOLEAN = "boolean"


class Operator(str, Enum):
    """Comparison operators accepted in rules."""

    EQ = "="
    NE = "!="
    GT = ">"
    LT = "<"
    GE = ">="
    LE = "<="

    @property
    def function(self) -> Callable[[Any, Any], Any]:
        """Binary function implementing the comparison.

        Works on plain Python values and on SQLAlchemy column
        expressions alike.
        """
        return _OPERATOR_FUNCTIONS[self]

    def apply(self, left: Any, right: Any) -> Any:
        """Apply the comparison to two operands."""
        return self.function(left, right)


_OPERATOR_FUNCTIONS: dict[Operator, Callable[[Any, Any], Any]] = {
    Operator.EQ: _op.eq,
    Operator.NE: _op.ne,
    Operator.GT: _op.gt,
    Operator.LT: _op.lt,
    Operator.GE: _op.ge,
    Operator.LE: _op.le,
}

OPERATORS: tuple[str, ...] = tuple(o.value for o in Operator)


class FieldRegistry(Mapping[str, str]):
    """Immutable mapping of field name to declared type name.

    Types are stored as plain strings so that a registry can declare a
    type the evaluator does not know; the evaluator rejects such fields
    with UnsupportedFieldTypeError instead of failing at startup.

    Example usage:
        registry = FieldRegistry({"price": FieldType.NUMBER})
        "price" in registry        # True
        registry.type_of("price")  # "number"
    """

    def __init__(self, fields: Mapping[str, str | FieldType]) -> None:
        self._fields: Mapping[str, str] = MappingProxyType(
            {name: str(getattr(kind, "value", kind)) for name, kind in fields.items()}
        )

    def __getitem__(self, name: str) -> str:
        return self._fields[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def __repr__(self) -> str:
        return f"FieldRegistry({dict(self._fields)!r})"

    def type_of(self, name: str) -> str | None:
        """Get the declared type of a field, or None if unregistered."""
        return self._fields.get(name)

    def describe(self) -> list[dict[str, str]]:
        """List registered fields with their types, sorted by name."""
        return [
            {"field": name, "type": kind}
            for name, kind in sorted(self._fields.items())
        ]


DEFAULT_REGISTRY = FieldRegistry(
    {
        "price": FieldType.NUMBER,
        "regular_price": FieldType.NUMBER,
        "sale_price": FieldType.NUMBER,
        "stock_quantity": FieldType.NUMBER,
        "average_rating": FieldType.NUMBER,
        "category": FieldType.STRING,
        "stock_status": FieldType.STRING,
        "title": FieldType.STRING,
        "created_at": FieldType.DATE,
        "on_sale": FieldType.BOOLEAN,
    }
)
