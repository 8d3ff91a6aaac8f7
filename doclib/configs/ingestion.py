"""
Ingestion configuration settings.

Chunking parameters and batch ingestion checkpoint cadence.

Dependencies: pydantic, pydantic_settings
System role: Ingestion pipeline configuration
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from doclib.configs.base import BaseSettings


class IngestionSettings(BaseSettings):
    """Settings for document ingestion."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="DOCLIB_INGESTION_",
        case_sensitive=False,
        extra="ignore",
    )

    chunk_size: int = Field(default=512, gt=0, description="Maximum chunk size in characters")
    chunk_overlap: int = Field(
        default=50,
        ge=0,
        description="Overlap between hard-split windows",
    )
    checkpoint_interval: int = Field(
        default=25,
        ge=1,
        description="Checkpoint the WAL after this many documents in a batch",
    )
    shutdown_checkpoint_timeout: float = Field(
        default=5.0,
        gt=0,
        description="Seconds to wait for the final checkpoint on shutdown",
    )
