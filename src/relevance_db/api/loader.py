"""
Process-wide search engine instance for the API server.
"""

import logging
from pathlib import Path

from relevance_db.engine import RelevanceSearch

logger = logging.getLogger(__name__)


# Global singleton instance
_search: RelevanceSearch | None = None


def get_search() -> RelevanceSearch:
    """
    Get the global RelevanceSearch instance.

    Returns:
        RelevanceSearch instance

    Raises:
        RuntimeError: If the engine is not initialized
    """
    global _search
    if _search is None:
        raise RuntimeError("RelevanceSearch not initialized. Call init_search() first.")
    return _search


def init_search(base_path: Path | str) -> RelevanceSearch:
    """
    Initialize the global RelevanceSearch instance.

    Args:
        base_path: Storage root containing catalog/ and postings/

    Returns:
        Initialized RelevanceSearch instance

    Raises:
        StorageUnavailable: If the storage root cannot be used
    """
    global _search
    _search = RelevanceSearch(base_path=Path(base_path))
    logger.info(f"RelevanceSearch initialized with base_path={base_path}")
    return _search


def reset_search() -> None:
    """Drop the global instance (mainly for testing)."""
    global _search
    _search = None
