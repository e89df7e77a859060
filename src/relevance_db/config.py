"""
Configuration management for the relevance-db system.
"""

from pathlib import Path
from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageConfig(BaseSettings):
    """Configuration for the Parquet storage layer."""

    base_path: Path = Field(
        default=Path("./data"), description="Base path for catalog and postings tables"
    )

    # Parquet settings
    compression: str = Field(default="zstd", description="Compression codec")
    compression_level: int = Field(
        default=6, description="Compression level (1-22 for zstd)"
    )

    model_config = SettingsConfigDict(env_prefix="STORAGE_")


class IndexingConfig(BaseSettings):
    """Configuration for tokenization and posting accumulation."""

    min_term_length: int = Field(
        default=2,
        ge=0,
        description="Tokens are indexed only when strictly longer than this many characters",
    )

    model_config = SettingsConfigDict(env_prefix="INDEXING_")


class QueryConfig(BaseSettings):
    """Defaults applied to every new set of query criteria."""

    fields_mode: Literal["ALL", "ANY"] = Field(
        default="ALL", description="How multiple field criteria combine"
    )
    terms_mode: Literal["ALL", "ANY"] = Field(
        default="ANY", description="How multiple term criteria combine"
    )
    content_filter: Literal["ON", "OFF", "UNRESTRICTED"] = Field(
        default="UNRESTRICTED",
        description="Require flagged (ON), unflagged (OFF) or any documents",
    )

    # Pagination
    default_limit: int = Field(default=1000, ge=1, description="Default page size")
    max_limit: int = Field(
        default=10_000, ge=1, description="Largest page size accepted by the API"
    )

    model_config = SettingsConfigDict(env_prefix="QUERY_")


class Config(BaseSettings):
    """Main configuration."""

    # Sub-configs
    storage: StorageConfig = Field(default_factory=StorageConfig)
    indexing: IndexingConfig = Field(default_factory=IndexingConfig)
    query: QueryConfig = Field(default_factory=QueryConfig)

    # Global settings
    log_level: str = Field(default="INFO", description="Logging level")

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", env_nested_delimiter="__"
    )


# Global config instance
_config: Optional[Config] = None


def get_config() -> Config:
    """Get or create the global configuration instance."""
    global _config
    if _config is None:
        _config = Config()
    return _config


def reset_config() -> None:
    """Reset the global configuration (mainly for testing)."""
    global _config
    _config = None
