"""
Exception classes for vecfilter.
"""


class VecFilterError(Exception):
    """Base exception for all vecfilter errors."""
    pass


class StorageError(VecFilterError):
    """Raised when storage operations fail."""
    pass


class QueryError(VecFilterError):
    """Raised when filter compilation or query execution fails."""
    pass


class ValidationError(VecFilterError, ValueError):
    """Raised when input validation fails."""
    pass
