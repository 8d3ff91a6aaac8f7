"""
Embedding ORM model.

Stores one fixed-dimension vector per chunk as a packed float32 blob.

Dependencies: sqlalchemy, numpy, doclib.boundary.db.base
System role: Vector persistence for similarity search
"""

import numpy as np
from sqlalchemy import ForeignKey, LargeBinary, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from doclib.boundary.db.base import Base


class EmbeddingModel(Base):
    """
    Embedding ORM model.

    Attributes:
        chunk_id: Primary key and foreign key to ChunkModel (cascade delete)
        embedding: D x float32, little-endian
    """

    __tablename__ = "embeddings"

    chunk_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("chunks.id", ondelete="CASCADE"),
        primary_key=True,
    )

    embedding: Mapped[bytes] = mapped_column(LargeBinary, nullable=False)

    # Relationships
    chunk = relationship("ChunkModel", back_populates="embedding")


def vector_to_blob(vector: list[float]) -> bytes:
    return np.asarray(vector, dtype="<f4").tobytes()
