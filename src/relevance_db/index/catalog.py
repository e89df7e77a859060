"""
Catalog tables mapping names to small integer surrogate ids.

Three catalogs share one get-or-create scheme:
- indexes: index name → index_id (global)
- fields: (index_id, normalized field name) → field_id, carrying a weight fixed
  at creation
- terms: normalized term → term_id (global), carrying a sensitivity flag

Lookups filter on the xxh32 name hash and then compare the literal name, so
hash collisions never merge two names.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

import polars as pl

from ..normalization.ids import name_hash, next_id
from ..normalization.text_normalizer import normalize_text
from ..storage.layout import StorageLayout
from ..storage.parquet_table import ParquetTable

logger = logging.getLogger(__name__)

INDEX_SCHEMA = {
    "index_id": pl.Int64,
    "name": pl.String,
    "name_hash": pl.UInt32,
}

FIELD_SCHEMA = {
    "field_id": pl.Int64,
    "index_id": pl.Int64,
    "name": pl.String,
    "name_hash": pl.UInt32,
    "weight": pl.Int64,
}

TERM_SCHEMA = {
    "term_id": pl.Int64,
    "term": pl.String,
    "term_hash": pl.UInt32,
    "sensitive": pl.Int8,
}


@dataclass(frozen=True)
class FieldEntry:
    """A weighted field belonging to one index."""

    field_id: int
    index_id: int
    name: str
    weight: int


class Catalog:
    """
    Base class for a name → id catalog persisted as one Parquet table.

    The table is loaded on first access and kept in memory; every insert
    rewrites the table atomically before the new id is returned.
    """

    TABLE: str = ""
    SCHEMA: dict[str, pl.DataType] = {}
    ID_COLUMN: str = ""
    NAME_COLUMN: str = ""
    HASH_COLUMN: str = ""

    def __init__(self, base_path: Path):
        """
        Initialize the catalog.

        Args:
            base_path: Base path for storage
        """
        self.base_path = Path(base_path)
        self.layout = StorageLayout(base_path)
        self.table = ParquetTable(self.layout.get_catalog_path(self.TABLE), self.SCHEMA)
        self._df: pl.DataFrame | None = None

    @property
    def frame(self) -> pl.DataFrame:
        """Current catalog contents (loaded lazily)."""
        if self._df is None:
            self._df = self.table.read()
            logger.debug(f"Loaded {self._df.height} rows from {self.table.path}")
        return self._df

    def __len__(self) -> int:
        return self.frame.height

    def _name_filter(self, name: str) -> pl.Expr:
        return (pl.col(self.HASH_COLUMN) == name_hash(name)) & (
            pl.col(self.NAME_COLUMN) == name
        )

    def _find_id(self, predicate: pl.Expr) -> int | None:
        matches = self.frame.filter(predicate)
        if matches.height == 0:
            return None
        return matches[self.ID_COLUMN][0]

    def _insert(self, rows: list[dict]) -> list[int]:
        """
        Append rows, assigning consecutive ids, and commit the table.

        Args:
            rows: Column values for each new row, without the id column

        Returns:
            Newly assigned ids in row order
        """
        first_id = next_id(self.frame[self.ID_COLUMN].max())
        new_ids = list(range(first_id, first_id + len(rows)))

        columns = {
            column: [
                new_id if column == self.ID_COLUMN else row[column]
                for new_id, row in zip(new_ids, rows)
            ]
            for column in self.SCHEMA
        }
        updated = pl.concat([self.frame, pl.DataFrame(columns, schema=self.SCHEMA)])

        self.table.write(updated)
        self._df = updated
        return new_ids


class IndexCatalog(Catalog):
    """Index name → index_id."""

    TABLE = "indexes"
    SCHEMA = INDEX_SCHEMA
    ID_COLUMN = "index_id"
    NAME_COLUMN = "name"
    HASH_COLUMN = "name_hash"

    def lookup(self, name: str) -> int | None:
        """Get the id of an existing index, or None."""
        return self._find_id(self._name_filter(name))

    def get_or_create(self, name: str) -> int:
        """
        Get the id of an index, creating the catalog entry if needed.

        Raises:
            StatementFailure: If the catalog cannot be read or written
        """
        index_id = self.lookup(name)
        if index_id is not None:
            return index_id

        (index_id,) = self._insert([{"name": name, "name_hash": name_hash(name)}])
        logger.info(f"Created index '{name}' with id {index_id}")
        return index_id


class FieldCatalog(Catalog):
    """
    (index_id, field name) → field_id with a per-field weight.

    Field names are stored normalized, the same way query criteria are, so
    "Title" and "title" name one field.
    """

    TABLE = "fields"
    SCHEMA = FIELD_SCHEMA
    ID_COLUMN = "field_id"
    NAME_COLUMN = "name"
    HASH_COLUMN = "name_hash"

    DEFAULT_WEIGHT = 1

    def lookup(self, index_id: int, name: str) -> int | None:
        """Get the id of an existing field within an index, or None."""
        name = normalize_text(name)
        return self._find_id((pl.col("index_id") == index_id) & self._name_filter(name))

    def get_or_create(self, index_id: int, name: str, weight: int = DEFAULT_WEIGHT) -> int:
        """
        Get the id of a field, creating it if needed.

        The weight only applies when the field is created; an existing
        field keeps the weight it was created with.

        Args:
            index_id: Owning index
            name: Field name (normalized before storing)
            weight: Weight for a newly created field

        Returns:
            Field ID
        """
        name = normalize_text(name)
        field_id = self.lookup(index_id, name)
        if field_id is not None:
            return field_id

        (field_id,) = self._insert(
            [
                {
                    "index_id": index_id,
                    "name": name,
                    "name_hash": name_hash(name),
                    "weight": weight,
                }
            ]
        )
        logger.info(
            f"Created field '{name}' (id {field_id}, weight {weight}) in index {index_id}"
        )
        return field_id

    def fields_frame(self, index_id: int) -> pl.DataFrame:
        """All fields of one index as a frame."""
        return self.frame.filter(pl.col("index_id") == index_id)

    def list_fields(self, index_id: int) -> list[FieldEntry]:
        """List the fields of one index ordered by id."""
        return [
            FieldEntry(
                field_id=row["field_id"],
                index_id=row["index_id"],
                name=row["name"],
                weight=row["weight"],
            )
            for row in self.fields_frame(index_id).sort("field_id").iter_rows(named=True)
        ]


class TermCatalog(Catalog):
    """Normalized term → term_id, shared by every index and field."""

    TABLE = "terms"
    SCHEMA = TERM_SCHEMA
    ID_COLUMN = "term_id"
    NAME_COLUMN = "term"
    HASH_COLUMN = "term_hash"

    def lookup(self, term: str) -> int | None:
        """Get the id of an existing term, or None."""
        return self._find_id(self._name_filter(term))

    def get_or_create(self, term: str) -> int:
        """Get the id of a term, creating it if needed."""
        return self.get_or_create_many([term])[term]

    def get_or_create_many(self, terms: Iterable[str]) -> dict[str, int]:
        """
        Resolve many terms at once, creating all missing ones in a single commit.

        Args:
            terms: Normalized terms (duplicates allowed)

        Returns:
            Mapping from each term to its id
        """
        wanted = list(dict.fromkeys(terms))
        if not wanted:
            return {}

        hashes = [name_hash(term) for term in wanted]
        known = self.frame.filter(
            pl.col("term_hash").is_in(hashes) & pl.col("term").is_in(wanted)
        )
        resolved = dict(zip(known["term"].to_list(), known["term_id"].to_list()))

        missing = [term for term in wanted if term not in resolved]
        if missing:
            new_ids = self._insert(
                [
                    {"term": term, "term_hash": name_hash(term), "sensitive": 0}
                    for term in missing
                ]
            )
            resolved.update(zip(missing, new_ids))
            logger.debug(f"Created {len(missing)} new terms")

        return {term: resolved[term] for term in wanted}

    def set_sensitive(self, term: str, sensitive: bool | int) -> int:
        """
        Assign the content-sensitivity flag of a term, creating it if needed.

        Args:
            term: Normalized term
            sensitive: Truthy for flagged content

        Returns:
            Term ID
        """
        term_id = self.get_or_create(term)
        flag = 1 if sensitive else 0

        updated = self.frame.with_columns(
            pl.when(pl.col("term_id") == term_id)
            .then(pl.lit(flag, dtype=pl.Int8))
            .otherwise(pl.col("sensitive"))
            .alias("sensitive")
        )
        self.table.write(updated)
        self._df = updated

        logger.info(f"Set sensitivity of term '{term}' (id {term_id}) to {flag}")
        return term_id

    def is_sensitive(self, term: str) -> bool:
        matches = self.frame.filter(self._name_filter(term))
        return matches.height > 0 and matches["sensitive"][0] == 1
