"""
Single-file Parquet tables with atomic rewrites.

Every catalog table and every postings partition is one Parquet file. A commit
writes the full table to a temporary file and renames it over the previous
version, so readers only ever see a complete table.
"""

import logging
from pathlib import Path
from typing import Optional

import polars as pl
import pyarrow as pa
import pyarrow.parquet as pq

from ..config import get_config
from ..errors import StatementFailure

logger = logging.getLogger(__name__)


class ParquetTable:
    """
    A Parquet file holding one table with a fixed column schema.
    """

    def __init__(
        self,
        path: Path,
        schema: dict[str, pl.DataType],
        compression: Optional[str] = None,
        compression_level: Optional[int] = None,
    ):
        """
        Initialize a table handle. Nothing is read until ``read()``.

        Args:
            path: Location of the Parquet file
            schema: Ordered column name → Polars dtype mapping
            compression: Compression codec (defaults to config, typically 'zstd')
            compression_level: Compression level (defaults to config)
        """
        config = get_config()

        self.path = Path(path)
        self.schema = schema
        self.compression = compression or config.storage.compression
        self.compression_level = (
            compression_level
            if compression_level is not None
            else config.storage.compression_level
        )

    def exists(self) -> bool:
        return self.path.exists()

    def empty(self) -> pl.DataFrame:
        """Return an empty frame with this table's schema."""
        return pl.DataFrame(schema=self.schema)

    def read(self) -> pl.DataFrame:
        """
        Read the whole table.

        Returns:
            DataFrame with exactly the declared columns (empty if the file is missing)

        Raises:
            StatementFailure: If the file exists but cannot be read
        """
        if not self.path.exists():
            return self.empty()

        try:
            df = pl.read_parquet(self.path)
            return df.select(list(self.schema)).cast(self.schema)
        except (OSError, pl.exceptions.PolarsError) as e:
            raise StatementFailure(f"Failed to read {self.path}: {e}") from e

    def scan(self) -> pl.LazyFrame:
        """Lazily scan the table (the file must exist)."""
        return pl.scan_parquet(self.path)

    def write(self, df: pl.DataFrame) -> int:
        """
        Atomically replace the table contents.

        Args:
            df: Frame containing at least the declared columns

        Returns:
            Number of rows written

        Raises:
            StatementFailure: If the file cannot be written
        """
        tmp_path = self.path.with_suffix(".tmp")

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)

            arrow_table = df.select(list(self.schema)).cast(self.schema).to_arrow()

            write_options = {}
            if pa.Codec.supports_compression_level(self.compression):
                write_options["compression_level"] = self.compression_level

            pq.write_table(
                arrow_table,
                tmp_path,
                compression=self.compression,
                use_dictionary=True,
                write_statistics=True,
                **write_options,
            )
            tmp_path.replace(self.path)
        except (OSError, pa.ArrowException, pl.exceptions.PolarsError) as e:
            tmp_path.unlink(missing_ok=True)
            raise StatementFailure(f"Failed to write {self.path}: {e}") from e

        logger.debug(f"Wrote {df.height} rows to {self.path}")
        return df.height
