"""
Chunk ORM model.

Represents one retrieval unit of a document. Rows are mirrored into the
chunks_fts full-text index by triggers (see doclib.boundary.db.schema).

Dependencies: sqlalchemy, doclib.boundary.db.base
System role: Chunk persistence for full-text and vector retrieval
"""

from sqlalchemy import ForeignKey, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from doclib.boundary.db.base import Base


class ChunkModel(Base):
    """
    Chunk ORM model.

    Attributes:
        id: "<doc_id>-<chunk_index>"
        doc_id: Foreign key to DocumentModel (cascade delete)
        page: Page number (PDF) or section number (Markdown)
        chunk_index: 0-based position, unique per document
        content: Normalized chunk text

    Constraints:
        (doc_id, chunk_index) unique
    """

    __tablename__ = "chunks"
    __table_args__ = (
        UniqueConstraint("doc_id", "chunk_index", name="uq_chunks_doc_index"),
        Index("ix_chunks_doc_id", "doc_id"),
    )

    id: Mapped[str] = mapped_column(String(64), primary_key=True)

    doc_id: Mapped[str] = mapped_column(
        String(12),
        ForeignKey("documents.id", ondelete="CASCADE"),
        nullable=False,
    )

    page: Mapped[int] = mapped_column(Integer, nullable=False)

    chunk_index: Mapped[int] = mapped_column(Integer, nullable=False)

    content: Mapped[str] = mapped_column(Text, nullable=False)

    # Relationships
    document = relationship("DocumentModel", back_populates="chunks")
    embedding = relationship(
        "EmbeddingModel",
        back_populates="chunk",
        uselist=False,
        passive_deletes=True,
    )
