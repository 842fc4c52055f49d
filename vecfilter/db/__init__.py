"""
Database module for vecfilter
Handles filter compilation and SQLite document storage
"""

from .document_store import DocumentStore

__all__ = ['DocumentStore']
