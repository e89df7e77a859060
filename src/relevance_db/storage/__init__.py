"""
Storage layer for catalog and postings Parquet tables.

Handles the on-disk layout and atomic table rewrites.
"""

from .layout import StorageLayout
from .parquet_table import ParquetTable

__all__ = ["ParquetTable", "StorageLayout"]
