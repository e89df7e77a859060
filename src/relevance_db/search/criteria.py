"""
Query criteria value object.

Criteria are immutable: build one per query with ``QueryCriteria.build``,
which normalizes field/term names and fills unset modes from QueryConfig.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional

from ..config import QueryConfig, get_config
from ..normalization.text_normalizer import normalize_text


class MatchMode(str, Enum):
    """How multiple criteria of one kind combine on a posting row."""

    ALL = "ALL"
    ANY = "ANY"


class ContentFilter(str, Enum):
    """Result gating by a document's maximum term sensitivity."""

    ON = "ON"
    OFF = "OFF"
    UNRESTRICTED = "UNRESTRICTED"

    @property
    def flag(self) -> int | None:
        """Required maximum sensitivity, or None when unrestricted."""
        return {ContentFilter.ON: 1, ContentFilter.OFF: 0}.get(self)


@dataclass(frozen=True)
class QueryCriteria:
    """
    Filters for one ranked query.

    Attributes:
        fields: Field names to match (empty = any field)
        terms: Normalized terms to match (empty = any term)
        document_ids: Explicit document allow-list (empty = no restriction)
        field_mode: Combination of field criteria per posting row
        term_mode: Combination of term criteria per posting row
        content_filter: Sensitivity gate applied per document
        unmatchable: A field or term criterion normalized to nothing, so no
            posting can match
    """

    fields: frozenset[str] = frozenset()
    terms: frozenset[str] = frozenset()
    document_ids: frozenset[int] = frozenset()
    field_mode: MatchMode = MatchMode.ALL
    term_mode: MatchMode = MatchMode.ANY
    content_filter: ContentFilter = ContentFilter.UNRESTRICTED
    unmatchable: bool = False

    @classmethod
    def build(
        cls,
        fields: Iterable[str] = (),
        terms: Iterable[str] = (),
        document_ids: Iterable[int] = (),
        field_mode: Optional[MatchMode | str] = None,
        term_mode: Optional[MatchMode | str] = None,
        content_filter: Optional[ContentFilter | str] = None,
        config: Optional[QueryConfig] = None,
    ) -> "QueryCriteria":
        """
        Build criteria, normalizing names and applying configured defaults.

        A name that normalizes to an empty string cannot match any term or
        field; it marks the criteria as unmatchable instead of widening them.

        Raises:
            ValueError: If a mode or content filter value is unknown
        """
        config = config or get_config().query
        fields = [normalize_text(name) for name in fields]
        terms = [normalize_text(term) for term in terms]

        return cls(
            fields=frozenset(fields),
            terms=frozenset(terms),
            document_ids=frozenset(int(document_id) for document_id in document_ids),
            field_mode=MatchMode(field_mode or config.fields_mode),
            term_mode=MatchMode(term_mode or config.terms_mode),
            content_filter=ContentFilter(content_filter or config.content_filter),
            unmatchable="" in fields or "" in terms,
        )
