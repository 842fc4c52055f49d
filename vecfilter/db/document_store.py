#!/usr/bin/env python3
"""
SQLite document store queried with MongoDB-style metadata filters.

Each row holds the document content, the full metadata as JSON and a copy of
every dedicated metadata value in its own column. Filters are compiled with
the SQLite dialect and appended to the store's own statements.
"""

import json
import logging
import os
import re
from typing import Any, Dict, Iterable, List, Optional

from .db_helpers import aconnect, with_connection
from .filters import FilterError, SQLITE, WhereClauseBuilder
from ..exceptions import ValidationError

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def _check_identifier(name: str, what: str) -> str:
    if not isinstance(name, str) or not _IDENTIFIER.match(name):
        raise ValidationError(f"Invalid {what} name: {name!r}")
    return name


def _column_value(value: Any) -> Any:
    # sqlite3 binds only scalars; containers are stored as JSON text
    if isinstance(value, (dict, list, tuple)):
        return json.dumps(value, default=str)
    return value


class DocumentStore:
    """Stores documents with JSON metadata in a single SQLite table."""

    def __init__(self,
                 db_path: str,
                 table_name: str = "documents",
                 content_column: str = "content",
                 metadata_column: str = "metadata",
                 specific_metadata_columns: Optional[Iterable[str]] = None):
        """
        Initialize the store.

        Args:
            db_path: Path to SQLite database file
            table_name: Table holding the documents
            content_column: Column holding the document text
            metadata_column: Column holding the metadata JSON
            specific_metadata_columns: Metadata keys copied into dedicated columns
        """
        self.db_path = db_path
        self.table_name = _check_identifier(table_name, "table")
        self.content_column = _check_identifier(content_column, "content column")
        self.metadata_column = _check_identifier(metadata_column, "metadata column")
        self.specific_metadata_columns = [
            _check_identifier(c, "metadata column") for c in (specific_metadata_columns or [])
        ]
        reserved = {"id", self.content_column, self.metadata_column}
        clashes = reserved.intersection(self.specific_metadata_columns)
        if clashes:
            raise ValidationError(f"Specific metadata columns clash with table columns: {sorted(clashes)}")

        self.logger = logging.getLogger(__name__)
        self.where_builder = WhereClauseBuilder(
            dedicated_columns=[self.content_column, *self.specific_metadata_columns],
            metadata_column=SQLITE.quote(self.metadata_column),
            dialect=SQLITE,
        )

    @property
    def _table(self) -> str:
        return SQLITE.quote(self.table_name)

    async def initialize(self):
        """Create the document table if it doesn't exist"""
        directory = os.path.dirname(self.db_path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        # Untyped columns keep whatever type was inserted
        specific = "".join(f", {SQLITE.quote(c)}" for c in self.specific_metadata_columns)
        async with aconnect(self.db_path, writer=True) as conn:
            await conn.execute(f"""
                CREATE TABLE IF NOT EXISTS {self._table} (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    {SQLITE.quote(self.content_column)} TEXT NOT NULL,
                    {SQLITE.quote(self.metadata_column)} TEXT NOT NULL DEFAULT '{{}}'{specific}
                )
            """)

    @with_connection(writer=True)
    async def add_documents(self, conn, documents: List[Dict[str, Any]]) -> List[int]:
        """
        Insert documents.

        Args:
            documents: Dicts with "content" and optional "metadata"

        Returns:
            Row ids of the inserted documents
        """
        columns = [self.content_column, self.metadata_column, *self.specific_metadata_columns]
        column_sql = ", ".join(SQLITE.quote(c) for c in columns)
        placeholders = ", ".join("?" for _ in columns)
        sql = f"INSERT INTO {self._table} ({column_sql}) VALUES ({placeholders})"

        ids = []
        for doc in documents:
            if "content" not in doc:
                raise ValidationError(f"Document is missing 'content': {doc!r}")
            metadata = doc.get("metadata") or {}
            values = [doc["content"], json.dumps(metadata, default=str)]
            values.extend(_column_value(metadata.get(c)) for c in self.specific_metadata_columns)
            cursor = await conn.execute(sql, values)
            ids.append(cursor.lastrowid)

        self.logger.debug(f"Inserted {len(ids)} documents into {self.table_name}")
        return ids

    @with_connection(writer=False)
    async def find(self, conn, filter: Optional[Dict[str, Any]] = None,
                   limit: Optional[int] = None) -> List[Dict[str, Any]]:
        """
        Get documents matching a filter, ordered by id.

        Args:
            filter: MongoDB-style filter; None matches everything
            limit: Maximum number of documents

        Returns:
            List of {"id", "content", "metadata"} dicts
        """
        where_clause, params = self._compile(filter)
        sql = (
            f"SELECT id, {SQLITE.quote(self.content_column)} AS content, "
            f"{SQLITE.quote(self.metadata_column)} AS metadata "
            f"FROM {self._table} {where_clause} ORDER BY id"
        )
        if limit is not None:
            sql += " LIMIT ?"
            params = [*params, int(limit)]

        cursor = await conn.execute(sql, params)
        rows = await cursor.fetchall()
        return [
            {"id": row["id"], "content": row["content"], "metadata": json.loads(row["metadata"])}
            for row in rows
        ]

    @with_connection(writer=False)
    async def count(self, conn, filter: Optional[Dict[str, Any]] = None) -> int:
        """Count documents matching a filter."""
        where_clause, params = self._compile(filter)
        cursor = await conn.execute(f"SELECT COUNT(*) FROM {self._table} {where_clause}", params)
        row = await cursor.fetchone()
        return row[0]

    @with_connection(writer=True)
    async def delete(self, conn, filter: Dict[str, Any]) -> int:
        """
        Delete documents matching a filter.

        Args:
            filter: MongoDB-style filter; required

        Returns:
            Number of deleted documents

        Raises:
            ValidationError: If no filter is given
        """
        if not filter:
            raise ValidationError("Parameter 'filter' is required when deleting documents")

        where_clause, params = self._compile(filter)
        cursor = await conn.execute(f"DELETE FROM {self._table} {where_clause}", params)
        self.logger.info(f"Deleted {cursor.rowcount} documents from {self.table_name}")
        return cursor.rowcount

    def _compile(self, filter: Optional[Dict[str, Any]]):
        try:
            where_clause, params = self.where_builder.build(filter)
        except FilterError as e:
            self.logger.error(f"Rejected filter {filter!r}: {e}")
            raise
        self.logger.debug(f"Compiled filter to {where_clause!r} with {params!r}")
        return where_clause, params
