"""
Posting store: (field_id, term_id, document_id) → occurrences.

Postings are partitioned by index and field (see StorageLayout). Saving
replaces the occurrence count of every (field, term, document) triple it
touches: the previous row for the triple is deleted and the new one inserted.
Each field partition commits on its own; there is no atomic boundary across
fields, so a failed save can leave some fields updated and others stale.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

import polars as pl

from ..errors import StatementFailure
from ..storage.layout import StorageLayout
from ..storage.parquet_table import ParquetTable
from .accumulator import PostingEntry
from .catalog import FieldCatalog, IndexCatalog, TermCatalog

logger = logging.getLogger(__name__)

POSTING_SCHEMA = {
    "term_id": pl.Int64,
    "document_id": pl.Int64,
    "occurrences": pl.Int64,
}


@dataclass
class PersistStats:
    """Outcome of one ``persist`` call."""

    postings_written: int = 0
    fields_committed: int = 0
    fields_failed: int = 0


class PostingStore:
    """
    Read and write postings and own the catalogs they reference.
    """

    def __init__(self, base_path: Path):
        """
        Open the store, creating the storage root if needed.

        Args:
            base_path: Base path for storage

        Raises:
            StorageUnavailable: If the storage root cannot be used
        """
        self.base_path = Path(base_path)
        self.layout = StorageLayout(base_path)
        self.layout.ensure_root()

        self.indexes = IndexCatalog(base_path)
        self.fields = FieldCatalog(base_path)
        self.terms = TermCatalog(base_path)

        logger.info(f"PostingStore opened at {self.base_path}")

    def _table(self, index_id: int, field_id: int) -> ParquetTable:
        return ParquetTable(self.layout.get_postings_path(index_id, field_id), POSTING_SCHEMA)

    def read_partition(self, index_id: int, field_id: int) -> pl.DataFrame:
        """Read every posting of one field."""
        return self._table(index_id, field_id).read()

    def replace_postings(
        self, index_id: int, field_id: int, postings: pl.DataFrame
    ) -> int:
        """
        Replace postings of one field and commit the partition.

        For each (term_id, document_id) in ``postings`` the existing row is
        deleted and the new one inserted, so the stored count is always the
        new count. Other rows of the partition are untouched.

        Args:
            index_id: Owning index
            field_id: Field whose partition is rewritten
            postings: Frame with term_id, document_id, occurrences

        Returns:
            Number of postings inserted
        """
        table = self._table(index_id, field_id)
        existing = table.read()

        kept = existing.join(
            postings.select("term_id", "document_id"),
            on=["term_id", "document_id"],
            how="anti",
        )
        table.write(pl.concat([kept, postings.select(list(POSTING_SCHEMA))]))
        return postings.height

    def delete_document(self, index_id: int, field_id: int, document_id: int) -> int:
        """
        Delete all postings of a document in one field.

        Returns:
            Number of rows removed
        """
        table = self._table(index_id, field_id)
        if not table.exists():
            return 0

        existing = table.read()
        kept = existing.filter(pl.col("document_id") != document_id)
        removed = existing.height - kept.height

        if removed:
            table.write(kept)
            logger.debug(
                f"Removed {removed} postings of document {document_id} "
                f"from field {field_id} (index {index_id})"
            )
        return removed

    def persist(self, entries: Iterable[PostingEntry]) -> PersistStats:
        """
        Save drained postings.

        Resolves (or creates) the index, field and term ids of every entry
        and replaces the stored count of each (field, term, document) triple.
        Entries are committed per field; a field whose catalog lookup or
        write fails is logged and skipped while the rest proceed.

        Args:
            entries: Postings from ``PostingAccumulator.drain()``

        Returns:
            PersistStats for the call
        """
        # (index_name, field_name) → {(document_id, term): occurrences}
        grouped: dict[tuple[str, str], dict[tuple[int, str], int]] = defaultdict(dict)
        for entry in entries:
            grouped[(entry.index_name, entry.field_name)][
                (entry.document_id, entry.term)
            ] = entry.occurrences

        stats = PersistStats()

        for (index_name, field_name), counts in grouped.items():
            try:
                index_id = self.indexes.get_or_create(index_name)
                field_id = self.fields.get_or_create(index_id, field_name)
                term_ids = self.terms.get_or_create_many(term for _, term in counts)

                postings = pl.DataFrame(
                    {
                        "term_id": [term_ids[term] for _, term in counts],
                        "document_id": [document_id for document_id, _ in counts],
                        "occurrences": list(counts.values()),
                    },
                    schema=POSTING_SCHEMA,
                )
                stats.postings_written += self.replace_postings(index_id, field_id, postings)
                stats.fields_committed += 1
            except StatementFailure as e:
                stats.fields_failed += 1
                logger.error(
                    f"Failed to save {len(counts)} postings for "
                    f"index '{index_name}' field '{field_name}': {e}"
                )

        logger.info(
            f"Saved {stats.postings_written} postings across "
            f"{stats.fields_committed} fields ({stats.fields_failed} failed)"
        )
        return stats

    def scan_index(self, index_id: int) -> pl.LazyFrame | None:
        """
        Lazily scan all postings of an index.

        Returns:
            LazyFrame with field_id, term_id, document_id, occurrences,
            or None when the index has no postings on disk
        """
        frames = []
        for field in self.fields.list_fields(index_id):
            table = self._table(index_id, field.field_id)
            if not table.exists():
                continue
            frames.append(
                table.scan().with_columns(
                    pl.lit(field.field_id, dtype=pl.Int64).alias("field_id")
                )
            )

        if not frames:
            return None

        return pl.concat(frames).select(
            "field_id", "term_id", "document_id", "occurrences"
        )
