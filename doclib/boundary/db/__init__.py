"""
Database boundary layer: ORM models, connection management and the index store.

Exports:
  - Base: Declarative base
  - create_sqlite_engine(), get_session_factory(): Connection management
  - create_schema(): Tables, FTS5 index and triggers
  - DocumentModel, ChunkModel, EmbeddingModel: ORM models
  - IndexStore: Storage and retrieval primitives

Dependencies: sqlalchemy, numpy
System role: Persistent storage for documents, chunks and embeddings
"""

from doclib.boundary.db.base import Base
from doclib.boundary.db.connection import create_sqlite_engine, get_session_factory
from doclib.boundary.db.index_store import IndexStore, bm25_to_score, build_fts_query
from doclib.boundary.db.models import ChunkModel, DocumentModel, EmbeddingModel
from doclib.boundary.db.schema import create_schema

__all__ = [
    # Base classes
    "Base",
    # Connection
    "create_sqlite_engine",
    "get_session_factory",
    "create_schema",
    # Models
    "ChunkModel",
    "DocumentModel",
    "EmbeddingModel",
    # Store
    "IndexStore",
    "bm25_to_score",
    "build_fts_query",
]
