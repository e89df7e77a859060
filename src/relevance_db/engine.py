"""
Stateful search facade.

Bundles the accumulator, posting store, document lifecycle and query engine
behind one object with builder-style criteria setters:

    search = RelevanceSearch(base_path=Path("./data"))
    search.index("blog", "title", 10, "Hello World")
    search.save()

    search.add_term("hello")
    search.set_terms_mode(MatchMode.ANY)
    results = search.get("blog")

Criteria set through the setters are consumed by ``get()``: after every
``get()`` they are reset to the configured defaults. ``total()`` reads the
same criteria but leaves them in place.
"""

import logging
from pathlib import Path
from typing import Optional

from .config import Config, get_config
from .errors import StatementFailure
from .index.accumulator import PostingAccumulator
from .index.lifecycle import DocumentLifecycle
from .index.postings import PersistStats, PostingStore
from .normalization.text_normalizer import normalize_text
from .search.criteria import ContentFilter, MatchMode, QueryCriteria
from .search.query import QueryEngine, RankedDocument

logger = logging.getLogger(__name__)


class RelevanceSearch:
    """
    Index documents and run ranked queries against one storage root.
    """

    def __init__(self, base_path: Optional[Path] = None, config: Optional[Config] = None):
        """
        Open the engine.

        Args:
            base_path: Storage root (defaults to config.storage.base_path)
            config: Configuration (defaults to the global config)

        Raises:
            StorageUnavailable: If the storage root cannot be used
        """
        self.config = config or get_config()
        self.base_path = Path(base_path or self.config.storage.base_path)

        self.store = PostingStore(self.base_path)
        self.lifecycle = DocumentLifecycle(self.store)
        self.engine = QueryEngine(self.store, self.config.query)
        self.accumulator = PostingAccumulator(self.config.indexing.min_term_length)

        self._reset_criteria()

    # Indexing

    def index(self, index_name: str, field_name: str, document_id: int, text: str) -> int:
        """Buffer the terms of ``text`` for one field of one document."""
        return self.accumulator.record(index_name, field_name, document_id, text)

    record = index

    def save(self, accumulator: Optional[PostingAccumulator] = None) -> PersistStats:
        """
        Drain an accumulator (the engine's own by default) into storage.
        """
        accumulator = accumulator or self.accumulator
        return self.store.persist(accumulator.drain())

    persist = save

    def flush(self, index_name: str, document_id: int) -> int:
        """Remove all postings of a document; returns rows removed."""
        return self.lifecycle.flush(index_name, document_id)

    def set_term_sensitivity(self, term: str, sensitive: bool | int) -> int:
        """Flag (or unflag) a term for the content filter; returns its id."""
        return self.store.terms.set_sensitive(normalize_text(term), sensitive)

    # Criteria

    def _reset_criteria(self) -> None:
        defaults = self.config.query
        self._fields: list[str] = []
        self._terms: list[str] = []
        self._ids: list[int] = []
        self._fields_mode = MatchMode(defaults.fields_mode)
        self._terms_mode = MatchMode(defaults.terms_mode)
        self._content_filter = ContentFilter(defaults.content_filter)

    def add_field(self, name: str) -> None:
        self._fields.append(name)

    def add_term(self, term: str) -> None:
        self._terms.append(term)

    def add_id(self, document_id: int) -> None:
        self._ids.append(int(document_id))

    def set_fields_mode(self, mode: MatchMode | str) -> None:
        """
        Raises:
            ValueError: If mode is not ALL or ANY
        """
        self._fields_mode = MatchMode(mode)

    def set_terms_mode(self, mode: MatchMode | str) -> None:
        self._terms_mode = MatchMode(mode)

    def set_content_filter(self, content_filter: ContentFilter | str) -> None:
        self._content_filter = ContentFilter(content_filter)

    def criteria(self) -> QueryCriteria:
        """Snapshot the current setter state as an immutable QueryCriteria."""
        return QueryCriteria.build(
            fields=self._fields,
            terms=self._terms,
            document_ids=self._ids,
            field_mode=self._fields_mode,
            term_mode=self._terms_mode,
            content_filter=self._content_filter,
            config=self.config.query,
        )

    # Queries

    def get(
        self, index_name: str, offset: int = 0, limit: Optional[int] = None
    ) -> list[RankedDocument]:
        """
        Run the current criteria as a ranked query, then reset the criteria.

        A failing query is logged and returns an empty list.
        """
        criteria = self.criteria()
        self._reset_criteria()

        try:
            return self.engine.query(index_name, criteria, offset, limit)
        except StatementFailure as e:
            logger.error(f"Query on index '{index_name}' failed: {e}", exc_info=True)
            return []

    def total(self, index_name: str) -> int:
        """
        Count documents matching the current criteria (criteria are kept).

        A failing count is logged and returns 0.
        """
        try:
            return self.engine.count(index_name, self.criteria())
        except StatementFailure as e:
            logger.error(f"Count on index '{index_name}' failed: {e}", exc_info=True)
            return 0
