"""
API serving layer.

Handles document indexing and ranked search over HTTP.
"""

from relevance_db.api.loader import get_search, init_search, reset_search
from relevance_db.api.models import (
    DocumentRequest,
    DocumentResponse,
    FlushResponse,
    SearchHit,
    SearchRequest,
    SearchResponse,
    SensitivityRequest,
    TermResponse,
)
from relevance_db.api.server import app

__all__ = [
    "get_search",
    "init_search",
    "reset_search",
    "DocumentRequest",
    "DocumentResponse",
    "FlushResponse",
    "SearchHit",
    "SearchRequest",
    "SearchResponse",
    "SensitivityRequest",
    "TermResponse",
    "app",
]
