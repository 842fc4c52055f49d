#!/usr/bin/env python3
"""
Compiles MongoDB-style filters into a prepared-statement WHERE clause.

Keys listed as dedicated columns are addressed by quoted identifier; every
other key is looked up inside the JSON metadata column. Literals are never
inlined: each one becomes a typed ``?`` placeholder plus a string parameter.

Example:
    builder = WhereClauseBuilder(["quality"], "VEC_META")
    where, params = builder.build({"quality": "good", "start": {"$gte": 100}})
    # where == 'WHERE ("quality" = ?) AND (JSON_VALUE(VEC_META, \'$.start\') >= TO_DOUBLE(?))'
    # params == ["good", "100"]
"""

import logging
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

from .base import (
    COLUMN_OPERATORS, LOGICAL_OPERATORS_TO_SQL,
    FilterCompilerError, FilterExpression, FilterOperator, InvalidFilterError,
    LogicalFilter, MissingOperandError, MongoFilterParser, OperandTypeError,
    RenderStrategy, UnsupportedOperatorError, UnsupportedValueError, check_property_name,
    describe, is_date_value
)
from .dialects import HANA, SQLDialect

Clause = Tuple[str, List[str]]


class ColumnResolver:
    """Maps a property key to a SQL selector."""

    def __init__(self, dedicated_columns: Iterable[str], metadata_column: str,
                 dialect: SQLDialect = HANA):
        self.dedicated_columns = frozenset(dedicated_columns)
        self.metadata_column = metadata_column
        self.dialect = dialect

    def is_dedicated(self, key: str) -> bool:
        return key in self.dedicated_columns

    def resolve(self, key: str) -> str:
        if key in self.dedicated_columns:
            return self.dialect.quote(key)
        return self.dialect.json_selector.format(column=self.metadata_column, key=key)


class LiteralEncoder:
    """
    Picks a typed placeholder for a single value.

    Every call returns exactly one ``(placeholder, parameter)`` pair;
    operators with several operands call it once per operand.
    """

    def __init__(self, dialect: SQLDialect = HANA):
        self.dialect = dialect
        self.logger = logging.getLogger(__name__)

    def encode(self, value: Any) -> Tuple[str, str]:
        """
        Args:
            value: bool, integer, string, date, or ``{"type": "date", "date": ...}``

        Returns:
            Tuple of (placeholder, parameter)

        Raises:
            UnsupportedValueError: For non-integer numbers and arbitrary objects
            MissingOperandError: For None and empty strings
        """
        # bool before int: bool is an int subclass
        if isinstance(value, bool):
            return self.dialect.boolean_placeholder, "true" if value else "false"

        if isinstance(value, (int, float)):
            if isinstance(value, float) and not value.is_integer():
                raise UnsupportedValueError(
                    f"Unsupported filter value type: non-integer number {value!r}"
                )
            return self.dialect.number_placeholder, str(int(value))

        if value is None or value == "":
            raise MissingOperandError("No operands provided")

        if is_date_value(value):
            date_value = value if isinstance(value, date) else value.get("date")
            if not date_value:
                raise MissingOperandError(f"No date provided in {describe(value)}")
            # date casts take no time part
            if isinstance(date_value, datetime):
                date_value = date_value.date()
            return self.dialect.date_placeholder, str(date_value)

        if not isinstance(value, str):
            raise UnsupportedValueError(f"Cannot handle value {describe(value)}")

        self.logger.warning(f"Using plain SQL placeholder '?' for string value: {value}")
        return "?", value


class WhereClauseBuilder:
    """
    Serializes a filter to a WHERE clause and its parameters.

    The clause is meant to be appended to a SELECT or DELETE statement and
    executed with the parameters bound positionally:

        where, params = WhereClauseBuilder(columns, "VEC_META").build(filter)
        cursor.execute(f'DELETE FROM "{table}" {where}', params)

    Instances hold only immutable configuration and may be shared.
    """

    def __init__(self,
                 dedicated_columns: Optional[Iterable[str]] = None,
                 metadata_column: str = "VEC_META",
                 dialect: SQLDialect = HANA,
                 parser: Optional[MongoFilterParser] = None):
        """
        Args:
            dedicated_columns: Metadata keys that have their own table column
            metadata_column: Name of the JSON metadata column
            dialect: SQL dialect used for selectors and placeholders
            parser: Parser for raw filter dictionaries
        """
        self.dialect = dialect
        self.resolver = ColumnResolver(dedicated_columns or (), metadata_column, dialect)
        self.encoder = LiteralEncoder(dialect)
        self.parser = parser or MongoFilterParser()

    @property
    def metadata_column(self) -> str:
        return self.resolver.metadata_column

    @property
    def dedicated_columns(self) -> frozenset:
        return self.resolver.dedicated_columns

    def build(self, filter: Optional[Union[Dict[str, Any], FilterExpression]] = None) -> Clause:
        """
        Build the WHERE clause for a filter.

        Args:
            filter: Filter dictionary, parsed FilterExpression, or None

        Returns:
            Tuple of ("WHERE ..." or "", params)

        Raises:
            FilterError: If the filter is rejected
        """
        expression = self._as_expression(filter)
        if expression.is_empty():
            return "", []

        statement, params = self._walk(expression)

        placeholder_count = statement.count("?")
        if placeholder_count != len(params):
            raise FilterCompilerError(
                f"Internal error: Mismatch between '?' placeholders ({placeholder_count}) "
                f"and parameters ({len(params)})"
            )
        return f"WHERE {statement}", params

    def compile(self, filter: Union[Dict[str, Any], FilterExpression]) -> Clause:
        """Compile a non-empty filter to a bare boolean expression."""
        expression = self._as_expression(filter)
        return self._walk(expression)

    def create_selector(self, column: str) -> str:
        return self.resolver.resolve(column)

    def compile_column_operation(self, column: str, operator: Union[str, FilterOperator],
                                 operands: Any) -> Clause:
        """
        Compile ``column operator operands`` to one SQL predicate.

        Raises:
            UnsupportedOperatorError: For logical or unknown operators
            InvalidFilterError: For unsafe column names and operands of the wrong shape
        """
        check_property_name(column)
        symbol = operator.value if isinstance(operator, FilterOperator) else operator
        op = FilterOperator.from_string(symbol)
        if op is not None and op.is_logical:
            raise UnsupportedOperatorError(
                symbol, f"Did not expect a logical operator, but got {symbol}"
            )
        if op not in COLUMN_OPERATORS:
            raise UnsupportedOperatorError(symbol)

        spec = COLUMN_OPERATORS[op]
        selector = self.create_selector(column)

        if spec.strategy is RenderStrategy.TEXT_SEARCH:
            placeholder, value = self.encoder.encode(operands)
            statement = self.dialect.text_search.format(
                placeholder=placeholder,
                column=self.dialect.quote(column),
                selector=selector,
            )
            return statement, [value]

        if spec.strategy is RenderStrategy.RANGE:
            if not isinstance(operands, (list, tuple)) or len(operands) != 2:
                raise InvalidFilterError(
                    f"Expected 2 operands for BETWEEN, but got {describe(operands)}"
                )
            from_placeholder, from_value = self.encoder.encode(operands[0])
            to_placeholder, to_value = self.encoder.encode(operands[1])
            statement = f"{selector} {spec.sql} {from_placeholder} AND {to_placeholder}"
            return statement, [from_value, to_value]

        if spec.strategy is RenderStrategy.MEMBERSHIP:
            if not isinstance(operands, (list, tuple)):
                raise OperandTypeError(
                    f"Expected an array for {spec.sql} operator, but got {describe(operands)}"
                )
            if not operands:
                raise InvalidFilterError(f"Expected at least one operand for {spec.sql} operator")
            encoded = [self.encoder.encode(item) for item in operands]
            placeholders = ", ".join(placeholder for placeholder, _ in encoded)
            statement = f"{selector} {spec.sql} ({placeholders})"
            return statement, [value for _, value in encoded]

        placeholder, value = self.encoder.encode(operands)
        return f"{selector} {spec.sql} {placeholder}", [value]

    @staticmethod
    def join_clauses(sql_operator: str, clauses: List[str]) -> str:
        """
        Join sibling clauses with AND/OR.

        A single clause is returned unchanged; otherwise each clause is
        parenthesized.
        """
        supported = list(LOGICAL_OPERATORS_TO_SQL.values())
        if sql_operator not in supported:
            raise FilterCompilerError(f"{sql_operator} is not in supported operators: {supported}")
        if not clauses:
            raise FilterCompilerError("No clauses to join")
        if any(not clause for clause in clauses):
            raise FilterCompilerError(f"Empty sql clause found in {describe(clauses)}")
        if len(clauses) == 1:
            return clauses[0]
        return f" {sql_operator} ".join(f"({clause})" for clause in clauses)

    def _as_expression(self, filter) -> FilterExpression:
        if isinstance(filter, FilterExpression):
            return filter
        return self.parser.parse(filter)

    def _walk(self, expression: FilterExpression) -> Clause:
        """Depth-first, in the order the caller wrote the keys."""
        if expression.is_empty():
            raise InvalidFilterError("Empty filter")

        statements: List[str] = []
        params: List[str] = []

        for node in expression.nodes:
            if isinstance(node, LogicalFilter):
                clause, node_params = self._walk_logical(node)
            elif node.operator is None:
                placeholder, value = self.encoder.encode(node.operand)
                clause = f"{self.create_selector(node.field)} = {placeholder}"
                node_params = [value]
            else:
                clause, node_params = self.compile_column_operation(
                    node.field, node.operator, node.operand
                )
            statements.append(clause)
            params.extend(node_params)

        return self.join_clauses(LOGICAL_OPERATORS_TO_SQL[FilterOperator.AND], statements), params

    def _walk_logical(self, node: LogicalFilter) -> Clause:
        clauses: List[str] = []
        params: List[str] = []
        for child in node.children:
            clause, child_params = self._walk(child)
            clauses.append(clause)
            params.extend(child_params)
        return self.join_clauses(LOGICAL_OPERATORS_TO_SQL[node.operator], clauses), params
