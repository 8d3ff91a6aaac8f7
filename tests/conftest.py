"""
Shared test fixtures and configuration for entire test suite.

Provides: Temporary SQLite index store, deterministic fake embedder,
sample documents and chunk helpers
Dependencies: pytest, sqlalchemy
System role: Test infrastructure and fixture management
"""

import hashlib
import re
from collections.abc import Sequence
from pathlib import Path

import pytest

from doclib.boundary.db import IndexStore, create_sqlite_engine
from doclib.boundary.embedding import EmbeddingClient
from doclib.core.chunker import Chunker
from doclib.core.exceptions import EmbeddingError
from doclib.core.query_engine import QueryEngine
from doclib.application import LibraryService
from doclib.models import Chunk, Document, EmbeddingRecord, chunk_id_for

DIMENSION = 64


def bag_of_words(text: str, dimension: int = DIMENSION) -> list[float]:
    """Hash each lowercase word into a bucket; similar texts get similar vectors."""
    vector = [0.0] * dimension
    for word in re.findall(r"\w+", text.lower()):
        bucket = int(hashlib.sha256(word.encode()).hexdigest(), 16) % dimension
        vector[bucket] += 1.0
    if not any(vector):
        vector[0] = 1.0
    return vector


def unit_vector(index: int, dimension: int = DIMENSION) -> list[float]:
    vector = [0.0] * dimension
    vector[index] = 1.0
    return vector


class FakeEmbedder(EmbeddingClient):
    """In-process embedder with switchable failures."""

    def __init__(self, dimension: int = DIMENSION) -> None:
        self.dimension = dimension
        self.healthy = True
        self.fail_embedding = False
        self.embed_calls: list[str] = []
        self.closed = False

    def embed(self, text: str) -> list[float]:
        self.embed_calls.append(text)
        if self.fail_embedding:
            raise EmbeddingError("Embedding service unreachable")
        return bag_of_words(text, self.dimension)

    def embed_batch(self, texts: Sequence[str], concurrency: int | None = None) -> list[list[float]]:
        return [self.embed(text) for text in texts]

    def check_health(self) -> None:
        if not self.healthy:
            raise EmbeddingError("Ollama not reachable")

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    return tmp_path / "library" / "library.db"


@pytest.fixture
def engine(db_path: Path):
    engine = create_sqlite_engine(db_path)
    yield engine
    engine.dispose()


@pytest.fixture
def store(engine) -> IndexStore:
    """
    Index store over a fresh SQLite file.

    Yields:
        IndexStore: Store with schema created, dimension DIMENSION
    """
    store = IndexStore(engine, DIMENSION)
    yield store
    store.close()


@pytest.fixture
def fake_embedder() -> FakeEmbedder:
    return FakeEmbedder()


@pytest.fixture
def library(store: IndexStore, fake_embedder: FakeEmbedder, tmp_path: Path) -> LibraryService:
    """Library service wired to the temporary store and fake embedder."""
    return LibraryService(
        store,
        fake_embedder,
        QueryEngine(store, fake_embedder),
        Chunker(chunk_size=200, chunk_overlap=20),
        library_path=tmp_path / "library",
    )


@pytest.fixture
def make_document(store: IndexStore):
    """
    Factory storing a document.

    Returns:
        Callable: make(doc_id, title=None, tags=None) -> Document
    """

    def make(doc_id: str = "doc000000001", title: str | None = None, tags: list[str] | None = None) -> Document:
        doc = Document(
            id=doc_id,
            title=title or f"Document {doc_id}",
            path=f"/library/{doc_id}.md",
            tags=tags or [],
        )
        return store.add_document(doc)

    return make


@pytest.fixture
def add_chunks(store: IndexStore):
    """
    Factory storing contiguous chunks for a document.

    Returns:
        Callable: add(doc_id, contents, page=1) -> list[Chunk]
    """

    def add(doc_id: str, contents: list[str], page: int = 1) -> list[Chunk]:
        chunks = [
            Chunk(
                id=chunk_id_for(doc_id, index),
                doc_id=doc_id,
                page=page,
                chunk_index=index,
                content=content,
            )
            for index, content in enumerate(contents)
        ]
        store.add_chunks(chunks)
        return chunks

    return add


@pytest.fixture
def add_vectors(store: IndexStore):
    """Factory storing embeddings: add(doc_id, vectors) in chunk order."""

    def add(doc_id: str, vectors: list[list[float]]) -> None:
        store.add_embeddings(
            [
                EmbeddingRecord(chunk_id=chunk_id_for(doc_id, index), embedding=vector)
                for index, vector in enumerate(vectors)
            ]
        )

    return add


@pytest.fixture
def markdown_file(tmp_path: Path) -> Path:
    """Markdown note with two sections."""
    path = tmp_path / "docs" / "react-notes.md"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        "# React Hooks\n\n"
        "React hooks let you use state and other features inside function components.\n\n"
        "# Class Components\n\n"
        "Classes were the older way to manage component state and lifecycle methods.\n",
        encoding="utf-8",
    )
    return path


@pytest.fixture
def unit_vec():
    """Factory for one-hot vectors of the store dimension."""
    return unit_vector


@pytest.fixture
def embed_text():
    """Deterministic bag-of-words embedding used by FakeEmbedder."""
    return bag_of_words
