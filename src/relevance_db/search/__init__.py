"""
Ranked search over persisted postings.
"""

from .criteria import ContentFilter, MatchMode, QueryCriteria
from .query import QueryEngine, RankedDocument

__all__ = [
    "ContentFilter",
    "MatchMode",
    "QueryCriteria",
    "QueryEngine",
    "RankedDocument",
]
