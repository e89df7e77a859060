"""
Error types raised by the storage, catalog and query layers.
"""


class RelevanceDBError(Exception):
    """Base class for all relevance-db errors."""


class StorageUnavailable(RelevanceDBError):
    """
    The storage root cannot be created or written.

    Raised once when a store is opened. The store instance is unusable
    afterwards and nothing retries.
    """


class StatementFailure(RelevanceDBError):
    """A single catalog or posting table read/write failed."""
