"""
Database models package.

Exports:
  - DocumentModel: Ingested document
  - ChunkModel: Retrieval unit, mirrored into chunks_fts
  - EmbeddingModel: float32 vector per chunk

Dependencies: sqlalchemy, doclib.boundary.db.base
System role: Database model definitions for domain entities
"""

from doclib.boundary.db.models.chunk_model import ChunkModel
from doclib.boundary.db.models.document_model import DocumentModel
from doclib.boundary.db.models.embedding_model import (
    EmbeddingModel,
    vector_to_blob,
)

__all__ = [
    "ChunkModel",
    "DocumentModel",
    "EmbeddingModel",
    "vector_to_blob",
]
