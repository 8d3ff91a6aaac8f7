"""
Library service orchestrator.

Coordinates document ingestion (extract, chunk, embed, store), search,
and library maintenance behind one caller-facing API.

Dependencies: doclib.boundary, doclib.core
System role: Document library orchestration
"""

import logging
from pathlib import Path

from doclib.boundary.db.index_store import IndexStore
from doclib.boundary.embedding.base import EmbeddingClient
from doclib.boundary.extraction import ExtractedDocument, get_extractor_for
from doclib.core.chunker import Chunker
from doclib.core.exceptions import (
    DocLibraryException,
    DocumentExistsError,
    DocumentNotFoundError,
    ExtractionError,
    NotFoundError,
    StorageError,
)
from doclib.core.query_engine import QueryEngine
from doclib.models import (
    AddOptions,
    Chunk,
    Document,
    EmbeddingRecord,
    FileType,
    IngestResult,
    LibraryStats,
    RepairReport,
    SearchOptions,
    SearchResult,
    chunk_id_for,
    document_id_for_path,
)

logger = logging.getLogger(__name__)


def build_chunks(doc_id: str, extracted: ExtractedDocument, chunker: Chunker) -> list[Chunk]:
    """
    Chunk every page or section of an extracted document.

    Chunk indexes are contiguous across the whole document; page keeps
    the page or section number each chunk came from.

    Args:
        doc_id: Owning document id
        extracted: Extractor output
        chunker: Configured chunker

    Returns:
        list[Chunk]: Chunks in reading order
    """
    markdown = extracted.file_type == FileType.MARKDOWN
    chunks: list[Chunk] = []
    for unit in extracted.units:
        for content in chunker.chunk(unit.text, markdown=markdown):
            index = len(chunks)
            chunks.append(
                Chunk(
                    id=chunk_id_for(doc_id, index),
                    doc_id=doc_id,
                    page=unit.number,
                    chunk_index=index,
                    content=content,
                )
            )
    return chunks


class LibraryService:
    """
    Library service orchestrator.

    Usage:
        library = LibraryService(store, embedder, query_engine, Chunker(512, 50))
        doc = library.add("~/papers/attention.pdf", AddOptions(tags=["ml"]))
        hits = library.search("scaled dot-product attention")
    """

    def __init__(
        self,
        store: IndexStore,
        embedder: EmbeddingClient,
        query_engine: QueryEngine,
        chunker: Chunker,
        embedding_concurrency: int = 5,
        library_path: Path | None = None,
        default_search: SearchOptions | None = None,
    ) -> None:
        """
        Initialize library service.

        Args:
            store: Index store
            embedder: Embedding client
            query_engine: Hybrid search engine over the same store
            chunker: Text chunker
            embedding_concurrency: Workers used when embedding one document
            library_path: Library directory reported by stats()
            default_search: Options used when a search passes none
        """
        self._store = store
        self._embedder = embedder
        self._query_engine = query_engine
        self._chunker = chunker
        self._embedding_concurrency = embedding_concurrency
        self._library_path = library_path
        self._default_search = default_search or SearchOptions()

    @property
    def store(self) -> IndexStore:
        return self._store

    def add(self, path: str | Path, options: AddOptions | None = None) -> Document:
        """
        Ingest a file into the library.

        Steps:
        1. Resolve path and reject paths already in the library
        2. Extract pages or sections and chunk them
        3. Check the embedding service and embed every chunk
        4. Store document, chunks and embeddings; on failure remove the document

        Embedding happens before any write, so an embedding failure leaves
        the library untouched.

        Args:
            path: PDF or Markdown file
            options: Title, tags and metadata

        Returns:
            Document: The stored document

        Raises:
            NotFoundError: File does not exist
            DocumentExistsError: Path already ingested
            ExtractionError: Unsupported type, unreadable file or no text
            EmbeddingError: Service unavailable or invalid vectors
            StorageError: Write failed (document removed again)
        """
        options = options or AddOptions()
        resolved = Path(path).expanduser().resolve()
        if not resolved.is_file():
            raise NotFoundError(f"File not found: {resolved}", resource="file", details={"path": str(resolved)})

        existing = self._store.get_document_by_path(str(resolved))
        if existing:
            raise DocumentExistsError(existing.title, str(resolved))

        extracted = get_extractor_for(resolved).extract(resolved)
        doc_id = document_id_for_path(resolved)
        chunks = build_chunks(doc_id, extracted, self._chunker) if extracted.has_text else []
        if not chunks:
            raise ExtractionError(
                "No text content extracted",
                path=str(resolved),
                file_type=extracted.file_type.value,
            )

        self._embedder.check_health()
        vectors = self._embedder.embed_batch(
            [chunk.content for chunk in chunks],
            concurrency=self._embedding_concurrency,
        )

        doc = Document(
            id=doc_id,
            title=options.title or resolved.stem,
            path=str(resolved),
            page_count=extracted.page_count,
            size_bytes=resolved.stat().st_size,
            tags=options.tags,
            file_type=extracted.file_type,
            metadata=options.metadata,
        )

        self._store.add_document(doc)
        try:
            self._store.add_chunks(chunks)
            self._store.add_embeddings(
                [
                    EmbeddingRecord(chunk_id=chunk.id, embedding=vector)
                    for chunk, vector in zip(chunks, vectors, strict=True)
                ]
            )
        except Exception:
            logger.error(f"{__name__}:add - Write failed for {doc_id}, removing document", exc_info=True)
            self._remove_partial(doc_id)
            raise

        logger.info(f"{__name__}:add - Added {doc.title} ({len(chunks)} chunks, {doc.page_count} pages)")
        return doc

    def _remove_partial(self, doc_id: str) -> None:
        try:
            self._store.delete_document(doc_id)
        except StorageError:
            logger.error(f"{__name__}:add - Cleanup of {doc_id} failed; run repair", exc_info=True)

    def ingest(self, path: str | Path, options: AddOptions | None = None) -> IngestResult:
        """
        Add a file and report the outcome instead of raising.

        Returns:
            IngestResult: Success with the document, or failure with the error
        """
        try:
            doc = self.add(path, options)
        except DocLibraryException as e:
            logger.warning(f"{__name__}:ingest - Failed {path}: {e}")
            return IngestResult(
                path=str(path),
                status="failed",
                error=e.message,
                error_type=type(e).__name__,
            )
        except Exception as e:
            logger.error(f"{__name__}:ingest - Unexpected error for {path}", exc_info=True)
            return IngestResult(
                path=str(path),
                status="failed",
                error=str(e) or type(e).__name__,
                error_type=type(e).__name__,
            )
        return IngestResult(
            path=str(path),
            status="success",
            document=doc,
            chunk_count=self._store.count_chunks(doc.id),
        )

    def search(self, query: str, options: SearchOptions | None = None) -> list[SearchResult]:
        """
        Hybrid search, degrading to full-text when embeddings are unavailable.

        Raises:
            StorageError: If a storage query fails
        """
        return self._query_engine.search(query, options or self._default_search)

    def fts_search(self, query: str, options: SearchOptions | None = None) -> list[SearchResult]:
        """Full-text search only; never calls the embedding service."""
        return self._query_engine.fts_search(query, options or self._default_search)

    def get(self, id_or_title: str) -> Document:
        """
        Look a document up by id or title.

        Exact id and exact title matches come first; otherwise an id
        prefix or a case-insensitive title substring is accepted.

        Raises:
            DocumentNotFoundError: Nothing matches
        """
        doc = self._store.find_document(id_or_title)
        if doc is None:
            raise DocumentNotFoundError(id_or_title)
        return doc

    def list_documents(self, tag: str | None = None) -> list[Document]:
        return self._store.list_documents(tag)

    def remove(self, id_or_title: str) -> Document:
        """
        Delete a document with its chunks and embeddings.

        Returns:
            Document: The removed document

        Raises:
            DocumentNotFoundError: Nothing matches
        """
        doc = self.get(id_or_title)
        self._store.delete_document(doc.id)
        logger.info(f"{__name__}:remove - Removed {doc.title}")
        return doc

    def tag(self, id_or_title: str, tags: list[str]) -> Document:
        """Replace a document's tags."""
        doc = self.get(id_or_title)
        return self._store.update_tags(doc.id, tags)

    def stats(self) -> LibraryStats:
        stats = self._store.get_stats()
        if self._library_path is not None:
            stats.library_path = str(self._library_path)
        return stats

    def repair(self) -> RepairReport:
        return self._store.repair()

    def checkpoint(self) -> None:
        self._store.checkpoint()

    def check_ready(self) -> None:
        """
        Verify the embedding service is usable.

        Raises:
            EmbeddingError: Service unreachable or model missing
        """
        self._embedder.check_health()

    def close(self) -> None:
        self._embedder.close()
        self._store.close()
