"""
Library maintenance models.

Statistics, repair reports and ingestion outcomes.

Dependencies: pydantic
System role: Results of maintenance and batch operations
"""

from typing import Literal

from pydantic import BaseModel, Field

from doclib.models.document import Document


class LibraryStats(BaseModel):
    """Row counts of the index store."""

    documents: int = Field(default=0, description="Number of documents")
    chunks: int = Field(default=0, description="Number of chunks")
    embeddings: int = Field(default=0, description="Number of embeddings")
    library_path: str | None = Field(default=None, description="Library directory")


class RepairReport(BaseModel):
    """Rows removed or restored by a repair pass."""

    orphaned_chunks: int = Field(default=0, description="Chunks without a document")
    orphaned_embeddings: int = Field(default=0, description="Embeddings without a chunk")
    invalid_embeddings: int = Field(
        default=0,
        description="Embeddings with wrong dimension, zero or non-finite vectors",
    )
    stale_vectors: int = Field(default=0, description="Vector index rows without a stored embedding")
    reindexed_vectors: int = Field(default=0, description="Stored embeddings re-added to the vector index")

    @property
    def total(self) -> int:
        return (
            self.orphaned_chunks
            + self.orphaned_embeddings
            + self.invalid_embeddings
            + self.stale_vectors
        )


class IngestResult(BaseModel):
    """Outcome of ingesting one path: either a document or an error."""

    path: str = Field(description="Source path")
    status: Literal["success", "failed"] = Field(description="Outcome")
    document: Document | None = Field(default=None, description="Stored document on success")
    chunk_count: int = Field(default=0, description="Chunks written")
    error: str | None = Field(default=None, description="Error message on failure")
    error_type: str | None = Field(default=None, description="Exception class name on failure")

    @property
    def ok(self) -> bool:
        return self.status == "success"


class BatchIngestReport(BaseModel):
    """Per-document outcomes of a batch ingestion."""

    results: list[IngestResult] = Field(default_factory=list)
    cancelled: bool = Field(default=False, description="Stopped early by cancellation")
    checkpoints: int = Field(default=0, description="Successful checkpoints taken")
    processing_time_ms: float = Field(default=0.0, description="Wall-clock duration")

    @property
    def succeeded(self) -> int:
        return sum(1 for r in self.results if r.ok)

    @property
    def failed(self) -> int:
        return sum(1 for r in self.results if not r.ok)

    @property
    def failures(self) -> list[IngestResult]:
        return [r for r in self.results if not r.ok]
