"""Unit tests for storage layout management."""

from pathlib import Path

import polars as pl
import pytest

from relevance_db.errors import StorageUnavailable
from relevance_db.storage import ParquetTable, StorageLayout


class TestStorageLayout:
    """Test suite for StorageLayout."""

    @pytest.fixture
    def layout(self, tmp_path):
        """Create a StorageLayout instance with temp directory."""
        return StorageLayout(tmp_path)

    def test_initialization(self, tmp_path):
        """Test StorageLayout initialization."""
        layout = StorageLayout(tmp_path)
        assert layout.base_path == tmp_path
        assert layout.catalog_root == tmp_path / "catalog"
        assert layout.postings_root == tmp_path / "postings"

    def test_get_catalog_path(self, layout, tmp_path):
        assert layout.get_catalog_path("terms") == tmp_path / "catalog" / "terms.parquet"

    def test_get_partition_path(self, layout, tmp_path):
        """Test partition path generation."""
        path = layout.get_partition_path(1, 3)
        assert path == tmp_path / "postings" / "index_id=1" / "field_id=3"

    def test_get_postings_path(self, layout, tmp_path):
        path = layout.get_postings_path(2, 7)
        expected = tmp_path / "postings" / "index_id=2" / "field_id=7" / "postings.parquet"
        assert path == expected

    def test_ensure_root_creates_directories(self, tmp_path):
        layout = StorageLayout(tmp_path / "new_root")
        layout.ensure_root()

        assert layout.catalog_root.is_dir()
        assert layout.postings_root.is_dir()

    def test_ensure_root_fails_on_file(self, tmp_path):
        """Test an unusable root raises StorageUnavailable."""
        blocker = tmp_path / "not_a_dir"
        blocker.write_text("occupied")

        with pytest.raises(StorageUnavailable):
            StorageLayout(blocker).ensure_root()

    def test_list_partitions_empty(self, layout):
        """Test listing partitions when none exist."""
        assert layout.list_partitions() == []

    def test_list_partitions(self, layout):
        """Test listing partitions, filtered and unfiltered."""
        for index_id, field_id in [(1, 2), (1, 1), (2, 5)]:
            layout.get_partition_path(index_id, field_id).mkdir(parents=True)
        # Stray directories are ignored
        (layout.postings_root / "scratch").mkdir(parents=True)
        (layout.postings_root / "index_id=x").mkdir(parents=True)

        assert layout.list_partitions() == [(1, 1), (1, 2), (2, 5)]
        assert layout.list_partitions(index_id=1) == [(1, 1), (1, 2)]
        assert layout.list_partitions(index_id=9) == []

    def test_get_stats(self, layout):
        """Test storage statistics."""
        assert layout.get_stats()["total_partitions"] == 0

        table = ParquetTable(
            layout.get_postings_path(1, 1), {"term_id": pl.Int64}
        )
        table.write(pl.DataFrame({"term_id": [1, 2, 3]}))
        layout.get_partition_path(1, 2).mkdir(parents=True)

        stats = layout.get_stats()
        assert stats["total_partitions"] == 2
        assert stats["postings_files"] == 1
        assert stats["total_size_bytes"] > 0
        assert stats["indexes"] == [{"index_id": 1, "fields": 2}]


class TestParquetTable:
    """Test suite for ParquetTable."""

    SCHEMA = {"term_id": pl.Int64, "term": pl.String, "sensitive": pl.Int8}

    def test_read_missing_returns_empty_with_schema(self, tmp_path):
        table = ParquetTable(tmp_path / "missing.parquet", self.SCHEMA)

        df = table.read()

        assert df.height == 0
        assert dict(df.schema) == self.SCHEMA
        assert not table.exists()

    def test_write_then_read(self, tmp_path):
        table = ParquetTable(tmp_path / "sub" / "terms.parquet", self.SCHEMA)
        df = pl.DataFrame(
            {"term_id": [1, 2], "term": ["cat", "dog"], "sensitive": [0, 1]},
            schema=self.SCHEMA,
        )

        assert table.write(df) == 2
        loaded = table.read()

        assert loaded.equals(df)
        assert dict(loaded.schema) == self.SCHEMA

    def test_write_replaces_contents_without_temp_files(self, tmp_path):
        path = tmp_path / "terms.parquet"
        table = ParquetTable(path, self.SCHEMA)
        table.write(pl.DataFrame({"term_id": [1], "term": ["cat"], "sensitive": [0]}))
        table.write(pl.DataFrame({"term_id": [2], "term": ["dog"], "sensitive": [1]}))

        assert table.read()["term"].to_list() == ["dog"]
        assert sorted(p.name for p in tmp_path.iterdir()) == ["terms.parquet"]

    def test_write_selects_declared_columns(self, tmp_path):
        table = ParquetTable(tmp_path / "terms.parquet", self.SCHEMA)
        table.write(
            pl.DataFrame(
                {"extra": ["x"], "sensitive": [0], "term": ["cat"], "term_id": [1]}
            )
        )

        assert table.read().columns == ["term_id", "term", "sensitive"]

    def test_uses_configured_compression(self, tmp_path):
        import pyarrow.parquet as pq

        path = tmp_path / "terms.parquet"
        table = ParquetTable(path, self.SCHEMA, compression="snappy")
        table.write(pl.DataFrame({"term_id": [1], "term": ["cat"], "sensitive": [0]}))

        metadata = pq.read_metadata(path)
        assert metadata.row_group(0).column(0).compression == "SNAPPY"

    def test_unreadable_file_raises_statement_failure(self, tmp_path):
        from relevance_db.errors import StatementFailure

        path = Path(tmp_path / "broken.parquet")
        path.write_bytes(b"this is not a parquet file")
        table = ParquetTable(path, self.SCHEMA)

        with pytest.raises(StatementFailure):
            table.read()

    def test_failed_write_removes_temp_file(self, tmp_path, monkeypatch):
        import pyarrow.parquet as pq

        from relevance_db.errors import StatementFailure

        path = tmp_path / "terms.parquet"
        table = ParquetTable(path, self.SCHEMA)
        table.write(pl.DataFrame({"term_id": [1], "term": ["cat"], "sensitive": [0]}))

        def partial_write(arrow_table, where, **kwargs):
            Path(where).write_bytes(b"half a file")
            raise OSError("disk full")

        monkeypatch.setattr(pq, "write_table", partial_write)

        with pytest.raises(StatementFailure):
            table.write(pl.DataFrame({"term_id": [2], "term": ["dog"], "sensitive": [0]}))

        assert sorted(p.name for p in tmp_path.iterdir()) == ["terms.parquet"]
        monkeypatch.undo()
        assert table.read()["term"].to_list() == ["cat"]
