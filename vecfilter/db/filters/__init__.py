"""
MongoDB-style filters compiled to prepared-statement WHERE clauses.

Metadata keys either live in dedicated table columns or inside one JSON
metadata column. The compiler emits only ``?`` placeholders; the literals
travel separately as string parameters.

Example usage:
    from vecfilter.db.filters import WhereClauseBuilder

    builder = WhereClauseBuilder(dedicated_columns=["quality"], metadata_column="VEC_META")
    where_clause, params = builder.build({
        "$or": [
            {"quality": "good"},
            {"start": {"$between": [100, 200]}}
        ]
    })
    sql = f'SELECT * FROM "DOCS" {where_clause}'
"""

from .base import (
    FilterOperator,
    RenderStrategy,
    OperatorSpec,
    COLUMN_OPERATORS,
    LOGICAL_OPERATORS_TO_SQL,
    PropertyFilter,
    LogicalFilter,
    FilterExpression,
    MongoFilterParser,
    FilterError,
    InvalidFilterError,
    MissingOperandError,
    OperandTypeError,
    UnsupportedOperatorError,
    UnsupportedValueError,
    FilterCompilerError
)

from .dialects import SQLDialect, HANA, SQLITE, get_dialect
from .where_clause import ColumnResolver, LiteralEncoder, WhereClauseBuilder

__all__ = [
    # Core classes
    'FilterOperator',
    'RenderStrategy',
    'OperatorSpec',
    'COLUMN_OPERATORS',
    'LOGICAL_OPERATORS_TO_SQL',
    'PropertyFilter',
    'LogicalFilter',
    'FilterExpression',
    'MongoFilterParser',

    # Compiler
    'ColumnResolver',
    'LiteralEncoder',
    'WhereClauseBuilder',

    # Dialects
    'SQLDialect',
    'HANA',
    'SQLITE',
    'get_dialect',

    # Errors
    'FilterError',
    'InvalidFilterError',
    'MissingOperandError',
    'OperandTypeError',
    'UnsupportedOperatorError',
    'UnsupportedValueError',
    'FilterCompilerError'
]
