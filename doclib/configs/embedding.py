"""
Embedding service configuration settings.

Manages the Ollama host, model and the fixed embedding dimension.

Dependencies: pydantic, pydantic_settings
System role: Inference service configuration for ingestion and search
"""

from pydantic import AliasChoices, Field
from pydantic_settings import SettingsConfigDict

from doclib.configs.base import BaseSettings


class EmbeddingSettings(BaseSettings):
    """Ollama embedding configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="DOCLIB_EMBEDDING_",
        populate_by_name=True,
        case_sensitive=False,
        extra="ignore",
    )

    host: str = Field(
        default="http://localhost:11434",
        validation_alias=AliasChoices("DOCLIB_EMBEDDING_HOST", "OLLAMA_HOST"),
        description="Ollama base URL",
    )
    model: str = Field(
        default="mxbai-embed-large",
        validation_alias=AliasChoices("DOCLIB_EMBEDDING_MODEL", "OLLAMA_MODEL"),
        description="Embedding model name as listed by /api/tags",
    )
    dimension: int = Field(
        default=1024,
        gt=0,
        description="Embedding vector dimension (1024 for mxbai-embed-large)",
    )
    concurrency: int = Field(default=5, ge=1, description="Max in-flight embedding calls")
    max_attempts: int = Field(default=3, ge=1, description="Attempts per embedding call")
    backoff_base: float = Field(
        default=0.1,
        ge=0.0,
        description="First retry delay in seconds, doubled on each attempt",
    )
    timeout: float = Field(default=60.0, gt=0, description="HTTP timeout in seconds")
