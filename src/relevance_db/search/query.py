"""
Ranked query engine over the posting store.

Query pipeline for one index:
1. Join postings with their field (name, weight) and term (term, sensitivity)
2. Keep rows passing the field predicate, the term predicate and the id allow-list
3. Group surviving rows by document:
       relevance = sum(occurrences) * sum(field weight)
4. Gate groups by the document's maximum sensitivity over all of its postings
   in the index (not only the surviving rows)
5. Sort by relevance descending, ties by document id, and slice the page

Field and term predicates are evaluated per posting row. With ``ALL`` the
criteria are AND-ed on the row, so two different terms (or fields) under
``ALL`` can never both hold for one row and the query matches nothing.

The scoring multiplies two sums over the same rows, so a document matching
several (field, term) postings grows super-linearly. This is kept for
compatibility with existing rankings.
"""

import logging
import operator
from dataclasses import dataclass
from functools import reduce
from typing import Optional

import polars as pl

from ..config import QueryConfig, get_config
from ..errors import StatementFailure
from ..index.postings import PostingStore
from .criteria import MatchMode, QueryCriteria

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RankedDocument:
    """A document and its relevance for one query."""

    document_id: int
    relevance: int


def _combine(column: str, values: frozenset, mode: MatchMode) -> pl.Expr:
    conditions = [pl.col(column) == value for value in sorted(values)]
    return reduce(operator.and_ if mode is MatchMode.ALL else operator.or_, conditions)


class QueryEngine:
    """
    Build filtered, ranked and paginated views of one index.

    Read-only: queries may run alongside saves and can observe a document
    whose fields are only partly updated.
    """

    def __init__(self, store: PostingStore, config: Optional[QueryConfig] = None):
        """
        Initialize the query engine.

        Args:
            store: Posting store (with its catalogs) to query
            config: Query defaults (defaults to global config)
        """
        self.store = store
        self.config = config or get_config().query

    def default_criteria(self) -> QueryCriteria:
        """Criteria with no restrictions and configured modes."""
        return QueryCriteria.build(config=self.config)

    def _row_predicate(self, criteria: QueryCriteria) -> pl.Expr | None:
        predicates = []
        if criteria.fields:
            predicates.append(_combine("field_name", criteria.fields, criteria.field_mode))
        if criteria.terms:
            predicates.append(_combine("term", criteria.terms, criteria.term_mode))
        if criteria.document_ids:
            predicates.append(pl.col("document_id").is_in(sorted(criteria.document_ids)))

        if not predicates:
            return None
        return reduce(operator.and_, predicates)

    def _ranked_groups(
        self, index_name: str, criteria: QueryCriteria
    ) -> pl.LazyFrame | None:
        """
        Build the lazy (document_id, relevance) frame for a query.

        Returns:
            LazyFrame of surviving document groups, or None if the index
            does not exist, has no postings, or the criteria cannot match
        """
        if criteria.unmatchable:
            logger.debug(f"Criteria for '{index_name}' contain an empty field or term")
            return None

        index_id = self.store.indexes.lookup(index_name)
        if index_id is None:
            logger.debug(f"Index '{index_name}' not found")
            return None

        postings = self.store.scan_index(index_id)
        if postings is None:
            return None

        fields = (
            self.store.fields.fields_frame(index_id)
            .lazy()
            .select("field_id", pl.col("name").alias("field_name"), "weight")
        )
        terms = self.store.terms.frame.lazy().select("term_id", "term", "sensitive")
        rows = postings.join(fields, on="field_id").join(terms, on="term_id")

        predicate = self._row_predicate(criteria)
        matched = rows.filter(predicate) if predicate is not None else rows

        groups = matched.group_by("document_id").agg(
            (pl.col("occurrences").sum() * pl.col("weight").sum()).alias("relevance")
        )

        flag = criteria.content_filter.flag
        if flag is not None:
            sensitivity = rows.group_by("document_id").agg(
                pl.col("sensitive").max().alias("max_sensitive")
            )
            groups = (
                groups.join(sensitivity, on="document_id")
                .filter(pl.col("max_sensitive") == flag)
                .drop("max_sensitive")
            )

        return groups

    def query(
        self,
        index_name: str,
        criteria: Optional[QueryCriteria] = None,
        offset: int = 0,
        limit: Optional[int] = None,
    ) -> list[RankedDocument]:
        """
        Run a ranked query and return one page of results.

        Args:
            index_name: Index to search
            criteria: Filters (defaults to no restrictions)
            offset: Number of ranked documents to skip (default: 0)
            limit: Page size (defaults to config, typically 1000)

        Returns:
            Documents ordered by relevance descending, then document id

        Raises:
            ValueError: If offset or limit is negative
            StatementFailure: If postings or catalogs cannot be read
        """
        limit = self.config.default_limit if limit is None else limit
        if offset < 0 or limit < 0:
            raise ValueError(f"offset and limit must be >= 0 (got {offset}, {limit})")

        groups = self._ranked_groups(index_name, criteria or self.default_criteria())
        if groups is None:
            return []

        try:
            page = (
                groups.sort(["relevance", "document_id"], descending=[True, False])
                .slice(offset, limit)
                .collect()
            )
        except (OSError, pl.exceptions.PolarsError) as e:
            raise StatementFailure(f"Query on index '{index_name}' failed: {e}") from e

        return [
            RankedDocument(document_id=row["document_id"], relevance=row["relevance"])
            for row in page.iter_rows(named=True)
        ]

    def count(self, index_name: str, criteria: Optional[QueryCriteria] = None) -> int:
        """
        Count documents matching a query, without sorting or pagination.

        Raises:
            StatementFailure: If postings or catalogs cannot be read
        """
        groups = self._ranked_groups(index_name, criteria or self.default_criteria())
        if groups is None:
            return 0

        try:
            return groups.select("document_id").collect().height
        except (OSError, pl.exceptions.PolarsError) as e:
            raise StatementFailure(f"Count on index '{index_name}' failed: {e}") from e
