"""
vecfilter
MongoDB-style metadata filters compiled to parameterized SQL WHERE clauses.
"""

from .db import DocumentStore
from .db.filters import WhereClauseBuilder, MongoFilterParser, HANA, SQLITE
from .exceptions import VecFilterError, StorageError, QueryError, ValidationError
from .config import Config

__version__ = "0.1.0"

__all__ = [
    "WhereClauseBuilder",
    "MongoFilterParser",
    "HANA",
    "SQLITE",
    "DocumentStore",
    "VecFilterError",
    "StorageError",
    "QueryError",
    "ValidationError",
    "Config"
]
