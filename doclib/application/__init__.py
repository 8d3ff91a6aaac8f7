"""
Application layer: caller-facing services.

Exports:
  - LibraryService: add, search, maintenance
  - IngestionService, shutdown_checkpoint: batch ingestion
"""

from doclib.application.ingestion_service import IngestionService, shutdown_checkpoint
from doclib.application.library_service import LibraryService, build_chunks

__all__ = [
    "IngestionService",
    "LibraryService",
    "build_chunks",
    "shutdown_checkpoint",
]
