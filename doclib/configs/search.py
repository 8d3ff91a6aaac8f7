"""
Search configuration settings.

Defaults for hybrid retrieval and context expansion. The boost and
tolerance factors are empirical and untuned.

Dependencies: pydantic, pydantic_settings
System role: Retrieval configuration
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from doclib.configs.base import BaseSettings


class SearchSettings(BaseSettings):
    """Hybrid search and expansion defaults."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="DOCLIB_SEARCH_",
        case_sensitive=False,
        extra="ignore",
    )

    limit: int = Field(default=10, ge=1, description="Number of results to return")
    threshold: float = Field(
        default=0.3,
        ge=0.0,
        le=1.0,
        description="Minimum vector similarity (0.0-1.0)",
    )
    hybrid: bool = Field(default=True, description="Also run full-text search")
    hybrid_boost: float = Field(
        default=1.2,
        ge=1.0,
        description="Score multiplier for hits found by both indexes (capped at 1.0)",
    )
    expand_tolerance: float = Field(
        default=1.2,
        ge=1.0,
        description="Expansion may overshoot max_chars by this factor",
    )
    default_expand_chars: int = Field(
        default=0,
        ge=0,
        description="Context expansion budget when the caller does not set one",
    )
