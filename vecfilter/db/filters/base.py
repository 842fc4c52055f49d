#!/usr/bin/env python3
"""
Base MongoDB-style filter parser.
Turns filter dictionaries into a small tagged tree (logical nodes and property
nodes) that the WHERE clause compiler walks without re-inspecting raw dicts.
"""

import json
import re
from dataclasses import dataclass
from datetime import date
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Optional, Tuple, Union

from ...exceptions import QueryError


LOGICAL_PREFIX = "$"


class FilterOperator(Enum):
    """MongoDB-style query operators."""
    # Comparison
    EQ = "$eq"
    NE = "$ne"
    GT = "$gt"
    GTE = "$gte"
    LT = "$lt"
    LTE = "$lte"

    # Set membership
    IN = "$in"
    NIN = "$nin"

    # Range
    BETWEEN = "$between"

    # Text
    LIKE = "$like"
    CONTAINS = "$contains"

    # Logical
    AND = "$and"
    OR = "$or"

    @property
    def is_logical(self) -> bool:
        return self in {FilterOperator.AND, FilterOperator.OR}

    @classmethod
    def is_valid(cls, value: str) -> bool:
        """Check if a string is a valid operator."""
        return value in {op.value for op in cls}

    @classmethod
    def from_string(cls, value: str) -> Optional['FilterOperator']:
        """Convert string to operator."""
        for op in cls:
            if op.value == value:
                return op
        return None


class RenderStrategy(Enum):
    """How a column operator is rendered to SQL."""
    BINARY = "binary"            # selector OP placeholder
    RANGE = "range"              # selector BETWEEN lo AND hi
    MEMBERSHIP = "membership"    # selector IN (p1, ..., pn)
    TEXT_SEARCH = "text_search"  # dialect-specific scoring function


@dataclass(frozen=True)
class OperatorSpec:
    sql: Optional[str]
    strategy: RenderStrategy


COLUMN_OPERATORS = MappingProxyType({
    FilterOperator.EQ: OperatorSpec("=", RenderStrategy.BINARY),
    FilterOperator.NE: OperatorSpec("<>", RenderStrategy.BINARY),
    FilterOperator.LT: OperatorSpec("<", RenderStrategy.BINARY),
    FilterOperator.LTE: OperatorSpec("<=", RenderStrategy.BINARY),
    FilterOperator.GT: OperatorSpec(">", RenderStrategy.BINARY),
    FilterOperator.GTE: OperatorSpec(">=", RenderStrategy.BINARY),
    FilterOperator.LIKE: OperatorSpec("LIKE", RenderStrategy.BINARY),
    FilterOperator.IN: OperatorSpec("IN", RenderStrategy.MEMBERSHIP),
    FilterOperator.NIN: OperatorSpec("NOT IN", RenderStrategy.MEMBERSHIP),
    FilterOperator.BETWEEN: OperatorSpec("BETWEEN", RenderStrategy.RANGE),
    FilterOperator.CONTAINS: OperatorSpec(None, RenderStrategy.TEXT_SEARCH),
})

LOGICAL_OPERATORS_TO_SQL = MappingProxyType({
    FilterOperator.AND: "AND",
    FilterOperator.OR: "OR",
})

# Characters that would break out of a quoted JSON path or shift placeholder
# positions once a key is interpolated into SQL text.
_UNSAFE_KEY_CHARS = re.compile(r"""['"?\\\s]""")


def describe(value: Any) -> str:
    """JSON rendering of a value for error messages."""
    try:
        return json.dumps(value, default=str)
    except (TypeError, ValueError):
        return repr(value)


def check_property_name(field: str) -> str:
    """Reject property names that cannot be interpolated into a selector."""
    if not isinstance(field, str) or not field:
        raise InvalidFilterError(f"Property names must be non-empty strings, but got {field!r}")
    if _UNSAFE_KEY_CHARS.search(field):
        raise InvalidFilterError(f"Unsupported character in property name {field!r}")
    return field


def is_date_value(value: Any) -> bool:
    """True for date objects and ``{"type": "date", "date": ...}`` dicts."""
    if isinstance(value, date):
        return True
    return isinstance(value, dict) and value.get("type") == "date"


@dataclass(frozen=True)
class PropertyFilter:
    """
    A comparison against one property.

    ``operator`` is the raw operator symbol, or None when the value was given
    directly (equality sugar).
    """
    field: str
    operator: Optional[str]
    operand: Any

    def __repr__(self):
        op = self.operator or "="
        return f"{self.field} {op} {describe(self.operand)}"


@dataclass(frozen=True)
class LogicalFilter:
    """An ``$and``/``$or`` over child expressions."""
    operator: FilterOperator
    children: Tuple['FilterExpression', ...]

    def __repr__(self):
        return f"{self.operator.value}({list(self.children)})"


FilterNode = Union[PropertyFilter, LogicalFilter]


@dataclass(frozen=True)
class FilterExpression:
    """
    One filter mapping. Its nodes keep the caller's key order and are
    implicitly AND-ed.
    """
    nodes: Tuple[FilterNode, ...]

    def is_empty(self) -> bool:
        return not self.nodes


class FilterError(QueryError):
    """Base exception for filter-related errors."""
    pass


class InvalidFilterError(FilterError, ValueError):
    """Raised when a filter is malformed or invalid."""
    pass


class OperandTypeError(InvalidFilterError, TypeError):
    """Raised when an operator receives an operand of the wrong shape."""
    pass


class UnsupportedOperatorError(FilterError, ValueError):
    """Raised when an operator is unknown or used in the wrong position."""
    def __init__(self, operator: str, message: Optional[str] = None):
        super().__init__(message or f"{operator} is not a valid column operator.")
        self.operator = operator


class UnsupportedValueError(FilterError, TypeError):
    """Raised when a value cannot be bound as a SQL literal."""
    pass


class MissingOperandError(UnsupportedValueError):
    """Raised when an operand is None or an empty string."""
    pass


class FilterCompilerError(FilterError, RuntimeError):
    """Raised when the compiler breaks one of its own invariants."""
    pass


class MongoFilterParser:
    """
    Parses MongoDB-style filter dictionaries into a FilterExpression tree.

    The parser is stateless, so a single instance can be shared between
    threads.
    """

    def __init__(self, max_depth: int = 32):
        """
        Initialize the parser.

        Args:
            max_depth: Maximum nesting depth of logical operators
        """
        self.max_depth = max_depth

    def parse(self, filters: Optional[Dict[str, Any]]) -> FilterExpression:
        """
        Parse MongoDB-style filters into a structured expression tree.

        Args:
            filters: MongoDB-style filter dictionary, or None

        Returns:
            FilterExpression tree; empty when there is nothing to filter on

        Raises:
            InvalidFilterError: If the filter shape is invalid
            UnsupportedOperatorError: If a logical operator is unknown
            UnsupportedValueError: If a property value has an unsupported type
        """
        if not filters:
            return FilterExpression(())
        if not isinstance(filters, dict):
            raise InvalidFilterError(f"Filter must be a dictionary, but got {describe(filters)}")
        return self._parse_dict(filters, depth=1)

    def _parse_dict(self, filters: Dict[str, Any], depth: int) -> FilterExpression:
        if depth > self.max_depth:
            raise InvalidFilterError(f"Filter nesting exceeds maximum depth of {self.max_depth}")
        if not filters:
            raise InvalidFilterError("Empty filter")

        nodes = []
        for key, value in filters.items():
            if not isinstance(key, str) or not key:
                raise InvalidFilterError(f"Filter keys must be non-empty strings, but got {key!r}")
            if key.startswith(LOGICAL_PREFIX):
                nodes.append(self._parse_logical(key, value, depth))
            else:
                nodes.append(self._parse_property(key, value))
        return FilterExpression(tuple(nodes))

    def _parse_logical(self, key: str, value: Any, depth: int) -> LogicalFilter:
        """Parse ``$and`` / ``$or``."""
        op = FilterOperator.from_string(key)
        if op is None or not op.is_logical:
            raise UnsupportedOperatorError(
                key, f"{key} is not a supported logical operator; expected one of "
                     f"{[o.value for o in LOGICAL_OPERATORS_TO_SQL]}"
            )
        if not isinstance(value, (list, tuple)):
            raise InvalidFilterError(f"{key} requires a list, but got {describe(value)}")
        if not value:
            raise InvalidFilterError(f"{key} requires at least one filter")

        children = []
        for item in value:
            if not isinstance(item, dict):
                raise InvalidFilterError(f"{key} items must be dictionaries, but got {describe(item)}")
            children.append(self._parse_dict(item, depth + 1))
        return LogicalFilter(op, tuple(children))

    def _parse_property(self, field: str, value: Any) -> PropertyFilter:
        """Parse ``field: value`` or ``field: {operator: operand}``."""
        check_property_name(field)

        if isinstance(value, dict) and "type" not in value:
            if len(value) != 1:
                raise InvalidFilterError(
                    f"Expecting a single entry 'operator: operands', but got {describe(value)}"
                )
            operator, operand = next(iter(value.items()))
            return PropertyFilter(field, operator, operand)

        if isinstance(value, float) and not value.is_integer():
            raise UnsupportedValueError(
                f"Unsupported filter value type for {field!r}: non-integer number {value!r}"
            )
        if isinstance(value, (list, tuple)):
            raise InvalidFilterError(
                f"Arrays are only allowed as operands of $in, $nin and $between, "
                f"but {field!r} got {describe(value)}"
            )
        return PropertyFilter(field, None, value)
