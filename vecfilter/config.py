"""
Configuration helpers for vecfilter.
Supports environment variables for easy deployment configuration.
"""

import os
from typing import Any, Dict, Iterable, Optional


DEFAULT_DB_PATH = "~/.vecfilter/documents.db"


def _split_columns(value: Optional[str]) -> list:
    if not value:
        return []
    return [c.strip() for c in value.split(",") if c.strip()]


class Config:
    """
    Configuration helper that reads from environment variables.

    Environment variables:
        VECFILTER_DB_PATH: SQLite database path
        VECFILTER_TABLE: Document table name (default: documents)
        VECFILTER_CONTENT_COLUMN: Content column name (default: content)
        VECFILTER_METADATA_COLUMN: JSON metadata column name (default: metadata)
        VECFILTER_SPECIFIC_COLUMNS: Comma-separated metadata keys with their own column
    """

    @staticmethod
    def from_env() -> Dict[str, Any]:
        """
        Create configuration from environment variables.

        Returns:
            Dict with configuration parameters for DocumentStore

        Example:
            from vecfilter import DocumentStore
            from vecfilter.config import Config

            store = DocumentStore(**Config.from_env())
        """
        return {
            "db_path": os.path.expanduser(os.getenv("VECFILTER_DB_PATH", DEFAULT_DB_PATH)),
            "table_name": os.getenv("VECFILTER_TABLE", "documents"),
            "content_column": os.getenv("VECFILTER_CONTENT_COLUMN", "content"),
            "metadata_column": os.getenv("VECFILTER_METADATA_COLUMN", "metadata"),
            "specific_metadata_columns": _split_columns(os.getenv("VECFILTER_SPECIFIC_COLUMNS")),
        }

    @staticmethod
    def for_local(db_path: str,
                  specific_metadata_columns: Optional[Iterable[str]] = None,
                  table_name: str = "documents") -> Dict[str, Any]:
        """
        Configuration for a local database file.

        Args:
            db_path: Path to the SQLite database
            specific_metadata_columns: Metadata keys with their own column
            table_name: Document table name

        Returns:
            Configuration dict for DocumentStore
        """
        return {
            "db_path": db_path,
            "table_name": table_name,
            "content_column": "content",
            "metadata_column": "metadata",
            "specific_metadata_columns": list(specific_metadata_columns or []),
        }
