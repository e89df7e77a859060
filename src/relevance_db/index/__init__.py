"""
Index building and management.

Handles posting accumulation, catalogs, the posting store and document removal.
"""

from .accumulator import PostingAccumulator, PostingEntry
from .catalog import FieldCatalog, FieldEntry, IndexCatalog, TermCatalog
from .lifecycle import DocumentLifecycle
from .postings import PersistStats, PostingStore

__all__ = [
    "PostingAccumulator",
    "PostingEntry",
    "IndexCatalog",
    "FieldCatalog",
    "FieldEntry",
    "TermCatalog",
    "PostingStore",
    "PersistStats",
    "DocumentLifecycle",
]
