"""
Core domain layer: exceptions and the chunking algorithm.

The query engine and context expander live in their own modules
(doclib.core.query_engine, doclib.core.context_expander) since they
depend on the boundary layer.
"""

from doclib.core.chunker import Chunker, chunk_text, normalize_whitespace
from doclib.core.exceptions import (
    DocLibraryException,
    DocumentExistsError,
    DocumentNotFoundError,
    EmbeddingError,
    ExtractionError,
    NotFoundError,
    StorageError,
    ValidationError,
)

__all__ = [
    "Chunker",
    "DocLibraryException",
    "DocumentExistsError",
    "DocumentNotFoundError",
    "EmbeddingError",
    "ExtractionError",
    "NotFoundError",
    "StorageError",
    "ValidationError",
    "chunk_text",
    "normalize_whitespace",
]
