"""
Configuration management module.

Provides centralized, type-safe configuration using Pydantic Settings.
All config modules support environment variable mapping with validation.
"""

from doclib.configs.database import DatabaseSettings
from doclib.configs.embedding import EmbeddingSettings
from doclib.configs.ingestion import IngestionSettings
from doclib.configs.library import LibrarySettings
from doclib.configs.search import SearchSettings
from doclib.configs.settings import Settings, get_settings

__all__ = [
    "DatabaseSettings",
    "EmbeddingSettings",
    "IngestionSettings",
    "LibrarySettings",
    "SearchSettings",
    "Settings",
    "get_settings",
]
