"""
Domain models.

Pydantic data contracts shared by the engine and the caller-facing services.
"""

from doclib.models.chunk import Chunk, EmbeddingRecord, chunk_id_for
from doclib.models.document import (
    AddOptions,
    Document,
    FileType,
    document_id_for_path,
    normalize_tags,
)
from doclib.models.library import BatchIngestReport, IngestResult, LibraryStats, RepairReport
from doclib.models.search import (
    ExpandDirection,
    ExpandedContext,
    MatchType,
    SearchOptions,
    SearchResult,
)

__all__ = [
    "AddOptions",
    "BatchIngestReport",
    "Chunk",
    "Document",
    "EmbeddingRecord",
    "ExpandDirection",
    "ExpandedContext",
    "FileType",
    "IngestResult",
    "LibraryStats",
    "MatchType",
    "RepairReport",
    "SearchOptions",
    "SearchResult",
    "chunk_id_for",
    "document_id_for_path",
    "normalize_tags",
]
