"""
Embedding boundary layer.

Exports:
  - EmbeddingClient: Abstract client interface
  - OllamaEmbeddingClient: HTTP client for a local Ollama server
  - validate_embedding: Dimension and finiteness check for vectors
"""

from doclib.boundary.embedding.base import EmbeddingClient
from doclib.boundary.embedding.ollama_client import OllamaEmbeddingClient, is_transient
from doclib.boundary.embedding.validation import is_valid_blob, validate_embedding

__all__ = [
    "EmbeddingClient",
    "OllamaEmbeddingClient",
    "is_transient",
    "is_valid_blob",
    "validate_embedding",
]
