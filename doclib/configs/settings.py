"""
Unified application settings.

Aggregates all configuration modules into a single Settings class.

Dependencies: All config modules
System role: Central configuration aggregator for the application
"""

from functools import lru_cache

from pydantic import Field

from doclib.configs.base import BaseSettings
from doclib.configs.database import DatabaseSettings
from doclib.configs.embedding import EmbeddingSettings
from doclib.configs.ingestion import IngestionSettings
from doclib.configs.library import LibrarySettings
from doclib.configs.search import SearchSettings


class Settings(BaseSettings):
    """Unified application settings aggregating all config modules."""

    library: LibrarySettings = Field(default_factory=LibrarySettings)
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    embedding: EmbeddingSettings = Field(default_factory=EmbeddingSettings)
    ingestion: IngestionSettings = Field(default_factory=IngestionSettings)
    search: SearchSettings = Field(default_factory=SearchSettings)


@lru_cache
def get_settings() -> Settings:
    """
    Get application settings singleton.

    Environment variables are loaded once, on first call.

    Returns:
        Settings: Application settings instance

    Usage:
        from doclib.configs import get_settings
        settings = get_settings()
    """
    return Settings()
