"""
Document ORM model.

Represents an ingested source file with its tags and metadata.

Dependencies: sqlalchemy, doclib.boundary.db.base
System role: Document persistence, parent of chunks
"""

from typing import Any

from sqlalchemy import JSON, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from doclib.boundary.db.base import AddedAtMixin, Base


class DocumentModel(Base, AddedAtMixin):
    """
    Document ORM model.

    Attributes:
        id: First 12 hex chars of SHA-256 of the source path
        title: Display title
        path: Resolved source path (unique)
        page_count: Pages (PDF) or sections (Markdown)
        size_bytes: Source file size
        tags: JSON array of tag strings (queried with json_each)
        file_type: "pdf" or "markdown"
        meta: Free-form JSON object, stored in the "metadata" column
        added_at: Ingestion timestamp (UTC)

    Relationships:
        chunks: Owned chunks (deleted by ON DELETE CASCADE)
    """

    __tablename__ = "documents"

    id: Mapped[str] = mapped_column(String(12), primary_key=True)

    title: Mapped[str] = mapped_column(String(512), nullable=False)

    path: Mapped[str] = mapped_column(
        String(4096),
        nullable=False,
        unique=True,
        doc="Resolved source path",
    )

    page_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    size_bytes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    tags: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)

    file_type: Mapped[str] = mapped_column(String(16), nullable=False, default="pdf")

    meta: Mapped[dict[str, Any]] = mapped_column(
        "metadata",
        JSON,
        nullable=False,
        default=dict,
    )

    # Relationships
    chunks = relationship(
        "ChunkModel",
        back_populates="document",
        passive_deletes=True,
    )
