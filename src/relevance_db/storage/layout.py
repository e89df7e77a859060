"""
Storage layout management for catalog and postings Parquet tables.

Directory structure under the base path:
    catalog/
      indexes.parquet
      fields.parquet
      terms.parquet
    postings/
      index_id={i}/
        field_id={f}/
          postings.parquet
"""

import logging
import os
from pathlib import Path
from typing import Optional

from ..errors import StorageUnavailable

logger = logging.getLogger(__name__)


class StorageLayout:
    """
    Manages the directory structure for catalog and postings tables.

    Postings use Hive-style partitioning by index_id and field_id, so each
    field's postings can be rewritten without touching any other field.
    """

    def __init__(self, base_path: Path):
        """
        Initialize storage layout manager.

        Args:
            base_path: Root directory for all data (e.g., ./data)
        """
        self.base_path = Path(base_path)
        self.catalog_root = self.base_path / "catalog"
        self.postings_root = self.base_path / "postings"

    def ensure_root(self) -> None:
        """
        Create the base directories and check they are writable.

        Raises:
            StorageUnavailable: If the directories cannot be created or written
        """
        try:
            self.catalog_root.mkdir(parents=True, exist_ok=True)
            self.postings_root.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageUnavailable(
                f"Cannot create storage root {self.base_path}: {e}"
            ) from e

        if not os.access(self.base_path, os.W_OK):
            raise StorageUnavailable(f"Storage root is not writable: {self.base_path}")

        logger.debug(f"Storage root ready at {self.base_path}")

    def get_catalog_path(self, table: str) -> Path:
        """
        Get the Parquet path of a catalog table.

        Example:
            >>> layout = StorageLayout(Path("./data"))
            >>> layout.get_catalog_path("terms")
            PosixPath('data/catalog/terms.parquet')
        """
        return self.catalog_root / f"{table}.parquet"

    def get_partition_path(self, index_id: int, field_id: int) -> Path:
        """
        Get the directory path for a postings partition.

        Args:
            index_id: Index identifier
            field_id: Field identifier

        Returns:
            Path to partition directory

        Example:
            >>> layout = StorageLayout(Path("./data"))
            >>> layout.get_partition_path(1, 3)
            PosixPath('data/postings/index_id=1/field_id=3')
        """
        return self.postings_root / f"index_id={index_id}" / f"field_id={field_id}"

    def get_postings_path(self, index_id: int, field_id: int) -> Path:
        """Get the Parquet file holding one field's postings."""
        return self.get_partition_path(index_id, field_id) / "postings.parquet"

    def list_partitions(self, index_id: Optional[int] = None) -> list[tuple[int, int]]:
        """
        List all postings partitions, optionally filtered by index_id.

        Args:
            index_id: Optional index ID to filter by

        Returns:
            Sorted list of (index_id, field_id) tuples
        """
        partitions = []

        if not self.postings_root.exists():
            return partitions

        for index_dir in self.postings_root.iterdir():
            if not index_dir.is_dir() or not index_dir.name.startswith("index_id="):
                continue

            try:
                idx_id = int(index_dir.name.split("=")[1])
            except (IndexError, ValueError):
                continue

            if index_id is not None and idx_id != index_id:
                continue

            for field_dir in index_dir.iterdir():
                if not field_dir.is_dir() or not field_dir.name.startswith("field_id="):
                    continue

                try:
                    partitions.append((idx_id, int(field_dir.name.split("=")[1])))
                except (IndexError, ValueError):
                    continue

        return sorted(partitions)

    def get_stats(self) -> dict:
        """
        Get storage statistics.

        Returns:
            Dictionary with partition/file counts and total bytes on disk
        """
        catalog_files = (
            sorted(self.catalog_root.glob("*.parquet"))
            if self.catalog_root.exists()
            else []
        )
        partitions = self.list_partitions()

        total_size = sum(path.stat().st_size for path in catalog_files)
        postings_files = 0
        index_stats: dict[int, dict[str, int]] = {}

        for index_id, field_id in partitions:
            path = self.get_postings_path(index_id, field_id)
            if path.exists():
                postings_files += 1
                total_size += path.stat().st_size

            stats = index_stats.setdefault(index_id, {"index_id": index_id, "fields": 0})
            stats["fields"] += 1

        return {
            "catalog_files": len(catalog_files),
            "total_partitions": len(partitions),
            "postings_files": postings_files,
            "total_size_bytes": total_size,
            "indexes": list(index_stats.values()),
        }
