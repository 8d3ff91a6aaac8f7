"""
Chunk and embedding domain models.

Represents a retrieval unit of a document and its embedding vector.

Dependencies: pydantic
System role: Data structures for the ingestion write path
"""

from pydantic import BaseModel, ConfigDict, Field


def chunk_id_for(doc_id: str, chunk_index: int) -> str:
    """Chunk ids are the document id suffixed with the chunk index."""
    return f"{doc_id}-{chunk_index}"


class Chunk(BaseModel):
    """Document chunk. Immutable once written."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Chunk identifier (<doc_id>-<chunk_index>)")
    doc_id: str = Field(description="Owning document id")
    page: int = Field(ge=0, description="Page number (PDF) or section number (Markdown)")
    chunk_index: int = Field(ge=0, description="0-based position within the document")
    content: str = Field(min_length=1, description="Chunk text content")


class EmbeddingRecord(BaseModel):
    """Embedding vector for one chunk."""

    chunk_id: str = Field(description="Chunk the vector belongs to")
    embedding: list[float] = Field(description="Embedding vector")
