"""
Document domain models.

Represents an ingested source file and the options used to add it.

Dependencies: pydantic
System role: Document data contracts
"""

import enum
import hashlib
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator


class FileType(str, enum.Enum):
    """Supported source formats."""

    PDF = "pdf"
    MARKDOWN = "markdown"


def document_id_for_path(path: str | Path) -> str:
    """
    Deterministic document id for a source path.

    Args:
        path: Resolved source path

    Returns:
        str: First 12 hex characters of the SHA-256 of the path
    """
    return hashlib.sha256(str(path).encode()).hexdigest()[:12]


def normalize_tags(tags: list[str]) -> list[str]:
    """Strip tags, drop blanks and duplicates, keep first-seen order."""
    seen: dict[str, None] = {}
    for tag in tags:
        tag = tag.strip()
        if tag:
            seen.setdefault(tag, None)
    return list(seen)


class Document(BaseModel):
    """An ingested document."""

    id: str = Field(description="Deterministic id derived from the source path")
    title: str = Field(description="Display title")
    path: str = Field(description="Resolved source path (unique)")
    added_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Ingestion timestamp (UTC)",
    )
    page_count: int = Field(default=0, ge=0, description="Pages (PDF) or sections (Markdown)")
    size_bytes: int = Field(default=0, ge=0, description="Source file size")
    tags: list[str] = Field(default_factory=list, description="Free-form tags")
    file_type: FileType = Field(default=FileType.PDF, description="Source format")
    metadata: dict[str, Any] = Field(default_factory=dict, description="Extra metadata")

    @field_validator("tags")
    @classmethod
    def _dedupe_tags(cls, tags: list[str]) -> list[str]:
        return normalize_tags(tags)


class AddOptions(BaseModel):
    """Options for adding a document to the library."""

    title: str | None = Field(default=None, description="Title override (default: file stem)")
    tags: list[str] = Field(default_factory=list, description="Tags to attach")
    metadata: dict[str, Any] = Field(default_factory=dict, description="Extra metadata")
