"""
SQLite index store.

Durable storage for documents, chunks and embeddings with two query
primitives: top-K cosine similarity through the sqlite-vec index and
FTS5 keyword search ranked by bm25. All writes of a batch share one
transaction; driver failures surface as StorageError.

Dependencies: sqlalchemy, sqlite-vec, doclib.boundary.db, doclib.boundary.embedding.validation
System role: Persistence and retrieval backend of the library
"""

import logging
import re
from collections.abc import Iterator, Sequence
from contextlib import contextmanager

from sqlalchemy import bindparam, delete, func, select, text, update
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from doclib.boundary.db.base import as_utc
from doclib.boundary.db.connection import get_session_factory
from doclib.boundary.db.models import ChunkModel, DocumentModel, EmbeddingModel, vector_to_blob
from doclib.boundary.db.schema import VEC_TABLE, create_schema
from doclib.boundary.embedding.validation import is_valid_blob, validate_embedding
from doclib.core.exceptions import (
    DocumentNotFoundError,
    NotFoundError,
    StorageError,
    ValidationError,
)
from doclib.models import (
    Chunk,
    Document,
    EmbeddingRecord,
    ExpandDirection,
    ExpandedContext,
    FileType,
    LibraryStats,
    RepairReport,
    SearchResult,
    normalize_tags,
)

logger = logging.getLogger(__name__)

_FTS_TOKEN = re.compile(r"\w+", re.UNICODE)

# Largest k sqlite-vec accepts in one KNN query
MAX_KNN = 4096

_KNN_SQL = f"""
    SELECT chunk_rowid, distance
    FROM {VEC_TABLE}
    WHERE embedding MATCH :query AND k = :k
    ORDER BY distance
"""


def build_fts_query(query: str) -> str | None:
    """
    Turn free text into an FTS5 MATCH expression.

    Each word token is quoted so FTS5 operators in user input are
    treated as plain words; adjacent phrases are implicitly AND-ed.

    Returns:
        str | None: MATCH expression, or None when the query has no words
    """
    tokens = _FTS_TOKEN.findall(query)
    if not tokens:
        return None
    return " ".join(f'"{token}"' for token in tokens)


def bm25_to_score(rank: float) -> float:
    """Map an FTS5 bm25 rank (more negative is better) into (0, 1)."""
    magnitude = abs(rank)
    return magnitude / (1.0 + magnitude)


def _any_tag_clause(tags: Sequence[str]):
    return text(
        "EXISTS (SELECT 1 FROM json_each(documents.tags) WHERE json_each.value IN :tags)"
    ).bindparams(bindparam("tags", value=list(tags), expanding=True))


def _drop_vectors(session: Session, rowids: Sequence[int]) -> None:
    if rowids:
        session.execute(
            text(f"DELETE FROM {VEC_TABLE} WHERE chunk_rowid = :rowid"),
            [{"rowid": rowid} for rowid in rowids],
        )


class IndexStore:
    """
    Document, chunk and embedding store over SQLite.

    Usage:
        store = IndexStore(create_sqlite_engine(path), dimension=1024)
        store.add_document(doc)
        store.add_chunks(chunks)
        store.add_embeddings(records)
        hits = store.vector_search(query_vector, limit=5, threshold=0.3)
    """

    def __init__(self, engine: Engine, dimension: int) -> None:
        """
        Initialize store and ensure the schema exists.

        Args:
            engine: Engine from create_sqlite_engine (WAL, foreign keys on)
            dimension: Embedding dimension D shared by all vectors

        Raises:
            ValidationError: If the existing vector index has another dimension
            StorageError: If schema creation fails
        """
        self._engine = engine
        self._session_factory = get_session_factory(engine)
        self.dimension = dimension

        with self._storage_errors("create_schema"):
            create_schema(engine, dimension)

    @contextmanager
    def _storage_errors(self, operation: str) -> Iterator[None]:
        try:
            yield
        except SQLAlchemyError as e:
            logger.error(f"{__name__}:{operation} - {type(e).__name__}: {e}", exc_info=True)
            raise StorageError(
                f"Storage operation failed: {operation}",
                operation=operation,
                details={"error": str(e)},
            ) from e

    @contextmanager
    def _transaction(self, operation: str) -> Iterator[Session]:
        with self._storage_errors(operation):
            with self._session_factory.begin() as session:
                yield session

    @contextmanager
    def _read(self, operation: str) -> Iterator[Session]:
        with self._storage_errors(operation):
            with self._session_factory() as session:
                yield session

    # ------------------------------------------------------------------
    # Documents
    # ------------------------------------------------------------------

    @staticmethod
    def _to_document(model: DocumentModel) -> Document:
        return Document(
            id=model.id,
            title=model.title,
            path=model.path,
            added_at=as_utc(model.added_at),
            page_count=model.page_count,
            size_bytes=model.size_bytes,
            tags=list(model.tags or []),
            file_type=FileType(model.file_type),
            metadata=dict(model.meta or {}),
        )

    def add_document(self, doc: Document) -> Document:
        """
        Insert or update a document by id.

        Args:
            doc: Document to store

        Returns:
            Document: The stored document

        Raises:
            StorageError: If another document already owns the path
        """
        with self._transaction("add_document") as session:
            session.merge(
                DocumentModel(
                    id=doc.id,
                    title=doc.title,
                    path=doc.path,
                    added_at=doc.added_at,
                    page_count=doc.page_count,
                    size_bytes=doc.size_bytes,
                    tags=list(doc.tags),
                    file_type=doc.file_type.value,
                    meta=dict(doc.metadata),
                )
            )
        logger.info(f"{__name__}:add_document - Stored document {doc.id} ({doc.title})")
        return doc

    def get_document(self, doc_id: str) -> Document | None:
        with self._read("get_document") as session:
            model = session.get(DocumentModel, doc_id)
            return self._to_document(model) if model else None

    def get_document_by_path(self, path: str) -> Document | None:
        with self._read("get_document_by_path") as session:
            model = session.execute(
                select(DocumentModel).where(DocumentModel.path == path)
            ).scalar_one_or_none()
            return self._to_document(model) if model else None

    def get_document_by_title(self, title: str) -> Document | None:
        """Exact title match; the newest document wins when titles repeat."""
        with self._read("get_document_by_title") as session:
            model = session.execute(
                select(DocumentModel)
                .where(DocumentModel.title == title)
                .order_by(DocumentModel.added_at.desc())
                .limit(1)
            ).scalar_one_or_none()
            return self._to_document(model) if model else None

    def find_document(self, query: str) -> Document | None:
        """
        Resolve a user-supplied id or title to one document.

        Tried in order: exact id, exact title, then any document whose
        id starts with the query or whose title contains it (case
        insensitive). The newest document wins among several matches.

        Args:
            query: Id, id prefix, title or part of a title

        Returns:
            Document | None: Best match, or None
        """
        query = query.strip()
        if not query:
            return None

        doc = self.get_document(query) or self.get_document_by_title(query)
        if doc is not None:
            return doc

        with self._read("find_document") as session:
            model = session.execute(
                select(DocumentModel)
                .where(
                    DocumentModel.id.startswith(query, autoescape=True)
                    | DocumentModel.title.icontains(query, autoescape=True)
                )
                .order_by(DocumentModel.added_at.desc())
                .limit(1)
            ).scalar_one_or_none()
            return self._to_document(model) if model else None

    def list_documents(self, tag: str | None = None) -> list[Document]:
        """
        List documents, newest first.

        Args:
            tag: Only documents carrying this tag

        Returns:
            list[Document]: Matching documents
        """
        stmt = select(DocumentModel).order_by(DocumentModel.added_at.desc())
        if tag:
            stmt = stmt.where(_any_tag_clause([tag]))
        with self._read("list_documents") as session:
            return [self._to_document(m) for m in session.execute(stmt).scalars()]

    def update_tags(self, doc_id: str, tags: list[str]) -> Document:
        """
        Replace a document's tags.

        Raises:
            DocumentNotFoundError: If the document does not exist
        """
        cleaned = normalize_tags(tags)
        with self._transaction("update_tags") as session:
            result = session.execute(
                update(DocumentModel).where(DocumentModel.id == doc_id).values(tags=cleaned)
            )
            if result.rowcount == 0:
                raise DocumentNotFoundError(doc_id)
        logger.info(f"{__name__}:update_tags - Document {doc_id} tags set to {cleaned}")
        return self.get_document(doc_id)

    def delete_document(self, doc_id: str) -> bool:
        """
        Delete a document with its chunks and embeddings in one transaction.

        Returns:
            bool: True if a document row was deleted
        """
        with self._transaction("delete_document") as session:
            rowids = session.execute(
                text("SELECT rowid FROM chunks WHERE doc_id = :doc_id"), {"doc_id": doc_id}
            ).scalars().all()
            _drop_vectors(session, rowids)
            result = session.execute(
                delete(DocumentModel).where(DocumentModel.id == doc_id),
                execution_options={"synchronize_session": False},
            )
            deleted = result.rowcount > 0
        if deleted:
            logger.info(f"{__name__}:delete_document - Deleted document {doc_id}")
        return deleted

    def get_stats(self) -> LibraryStats:
        with self._read("get_stats") as session:
            return LibraryStats(
                documents=session.scalar(select(func.count()).select_from(DocumentModel)),
                chunks=session.scalar(select(func.count()).select_from(ChunkModel)),
                embeddings=session.scalar(select(func.count()).select_from(EmbeddingModel)),
            )

    # ------------------------------------------------------------------
    # Chunks and embeddings
    # ------------------------------------------------------------------

    def count_chunks(self, doc_id: str) -> int:
        with self._read("count_chunks") as session:
            return session.scalar(
                select(func.count()).select_from(ChunkModel).where(ChunkModel.doc_id == doc_id)
            )

    def add_chunks(self, chunks: Sequence[Chunk]) -> int:
        """
        Insert chunks atomically.

        Args:
            chunks: Chunks to insert (may span documents)

        Returns:
            int: Number of chunks written

        Raises:
            NotFoundError: If any chunk references a missing document
            StorageError: If any row fails (duplicate id or index)
        """
        if not chunks:
            return 0

        doc_ids = {chunk.doc_id for chunk in chunks}
        with self._transaction("add_chunks") as session:
            existing = set(
                session.execute(
                    select(DocumentModel.id).where(DocumentModel.id.in_(doc_ids))
                ).scalars()
            )
            missing = sorted(doc_ids - existing)
            if missing:
                raise NotFoundError(
                    "Chunks reference missing documents",
                    resource="document",
                    details={"doc_ids": missing},
                )

            session.add_all(
                ChunkModel(
                    id=chunk.id,
                    doc_id=chunk.doc_id,
                    page=chunk.page,
                    chunk_index=chunk.chunk_index,
                    content=chunk.content,
                )
                for chunk in chunks
            )

        logger.info(f"{__name__}:add_chunks - Stored {len(chunks)} chunks")
        return len(chunks)

    def add_embeddings(self, items: Sequence[EmbeddingRecord]) -> int:
        """
        Insert embeddings atomically after validating every vector.

        Args:
            items: One record per chunk

        Returns:
            int: Number of embeddings written

        Raises:
            ValidationError: If any vector has the wrong dimension or is not finite
            NotFoundError: If any record references a missing chunk
            StorageError: If the transaction fails
        """
        if not items:
            return 0

        blobs: dict[str, bytes] = {}
        for item in items:
            try:
                vector = validate_embedding(item.embedding, self.dimension)
            except ValidationError as e:
                e.details["chunk_id"] = item.chunk_id
                raise
            blobs[item.chunk_id] = vector_to_blob(vector)

        chunk_ids = set(blobs)
        with self._transaction("add_embeddings") as session:
            existing = set(
                session.execute(
                    select(ChunkModel.id).where(ChunkModel.id.in_(chunk_ids))
                ).scalars()
            )
            missing = sorted(chunk_ids - existing)
            if missing:
                raise NotFoundError(
                    "Embeddings reference missing chunks",
                    resource="chunk",
                    details={"chunk_ids": missing},
                )

            for chunk_id, blob in blobs.items():
                session.merge(EmbeddingModel(chunk_id=chunk_id, embedding=blob))

            rowids = dict(
                session.execute(
                    text("SELECT id, rowid FROM chunks WHERE id IN :ids").bindparams(
                        bindparam("ids", value=list(chunk_ids), expanding=True)
                    )
                ).all()
            )
            _drop_vectors(session, list(rowids.values()))
            # Zero vectors have no cosine direction and stay out of the index
            indexed = [
                {"rowid": rowids[chunk_id], "embedding": blob}
                for chunk_id, blob in blobs.items()
                if is_valid_blob(blob, self.dimension)
            ]
            if indexed:
                session.execute(
                    text(f"INSERT INTO {VEC_TABLE}(chunk_rowid, embedding) VALUES (:rowid, :embedding)"),
                    indexed,
                )

        logger.info(f"{__name__}:add_embeddings - Stored {len(blobs)} embeddings")
        return len(blobs)

    # ------------------------------------------------------------------
    # Retrieval
    # ------------------------------------------------------------------

    def vector_search(
        self,
        query_vector: Sequence[float],
        limit: int = 10,
        threshold: float = 0.0,
        tags: Sequence[str] | None = None,
    ) -> list[SearchResult]:
        """
        Top-K cosine similarity search over the sqlite-vec index.

        Nearest neighbours come from the index ordered by cosine distance;
        similarity is 1 - distance. With a tag filter the neighbour count
        starts at three times the limit and doubles until enough tagged
        hits are found, the threshold cuts the list, or the index runs out.

        Args:
            query_vector: Query embedding (validated first)
            limit: Maximum number of results
            threshold: Minimum similarity (1 - cosine distance)
            tags: Only documents carrying any of these tags

        Returns:
            list[SearchResult]: Hits ordered by similarity descending

        Raises:
            ValidationError: If the query vector is invalid
            StorageError: If the query fails
        """
        blob = vector_to_blob(validate_embedding(query_vector, self.dimension))
        if limit <= 0 or not is_valid_blob(blob, self.dimension):
            return []

        k = min(limit * (3 if tags else 1), MAX_KNN)
        with self._read("vector_search") as session:
            while True:
                neighbours = session.execute(text(_KNN_SQL), {"query": blob, "k": k}).all()
                similar = [(row.chunk_rowid, 1.0 - row.distance) for row in neighbours]
                kept = [(rowid, sim) for rowid, sim in similar if sim >= threshold]

                rows = self._chunk_rows(session, [rowid for rowid, _ in kept], tags)
                hits = [(rows[rowid], sim) for rowid, sim in kept if rowid in rows][:limit]

                if (
                    len(hits) >= limit
                    or len(kept) < len(similar)
                    or len(neighbours) < k
                    or k >= MAX_KNN
                ):
                    break
                k = min(k * 2, MAX_KNN)

        return [
            SearchResult(
                doc_id=row.doc_id,
                title=row.title,
                page=row.page,
                chunk_index=row.chunk_index,
                content=row.content,
                score=max(0.0, min(1.0, similarity)),
                match_type="vector",
            )
            for row, similarity in hits
        ]

    @staticmethod
    def _chunk_rows(session: Session, rowids: list[int], tags: Sequence[str] | None) -> dict:
        if not rowids:
            return {}
        sql = """
            SELECT c.rowid AS chunk_rowid, c.doc_id, c.page, c.chunk_index, c.content,
                   documents.title
            FROM chunks AS c
            JOIN documents ON documents.id = c.doc_id
            WHERE c.rowid IN :rowids
        """
        params = [bindparam("rowids", value=rowids, expanding=True)]
        if tags:
            sql += " AND EXISTS (SELECT 1 FROM json_each(documents.tags) WHERE json_each.value IN :tags)"
            params.append(bindparam("tags", value=list(tags), expanding=True))
        return {row.chunk_rowid: row for row in session.execute(text(sql).bindparams(*params))}

    def fts_search(
        self,
        query: str,
        limit: int = 10,
        tags: Sequence[str] | None = None,
    ) -> list[SearchResult]:
        """
        Full-text keyword search ranked by bm25.

        Args:
            query: Free text; every word must appear in the chunk
            limit: Maximum number of results
            tags: Only documents carrying any of these tags

        Returns:
            list[SearchResult]: Hits ordered by relevance descending

        Raises:
            StorageError: If the query fails
        """
        match = build_fts_query(query)
        if match is None:
            return []

        sql = """
            SELECT c.doc_id, c.page, c.chunk_index, c.content, documents.title,
                   chunks_fts.rank AS rank
            FROM chunks_fts
            JOIN chunks AS c ON c.rowid = chunks_fts.rowid
            JOIN documents ON documents.id = c.doc_id
            WHERE chunks_fts MATCH :match
        """
        params = [bindparam("match", value=match), bindparam("limit", value=limit)]
        if tags:
            sql += " AND EXISTS (SELECT 1 FROM json_each(documents.tags) WHERE json_each.value IN :tags)"
            params.append(bindparam("tags", value=list(tags), expanding=True))
        sql += " ORDER BY rank LIMIT :limit"

        with self._read("fts_search") as session:
            rows = session.execute(text(sql).bindparams(*params)).all()

        return [
            SearchResult(
                doc_id=row.doc_id,
                title=row.title,
                page=row.page,
                chunk_index=row.chunk_index,
                content=row.content,
                score=bm25_to_score(row.rank),
                match_type="fts",
            )
            for row in rows
        ]

    def get_expanded_context(
        self,
        doc_id: str,
        chunk_index: int,
        max_chars: int = 2000,
        direction: ExpandDirection = "both",
        tolerance: float = 1.2,
    ) -> ExpandedContext:
        """
        Grow a window of neighbouring chunks around a target chunk.

        Neighbours are added while the window is shorter than max_chars,
        before-side first. A neighbour that would push the window past
        max_chars * tolerance stops growth in that direction.

        Args:
            doc_id: Document of the target chunk
            chunk_index: Target chunk index
            max_chars: Character budget
            direction: "before", "after" or "both"
            tolerance: Overshoot factor allowed for the last neighbour

        Returns:
            ExpandedContext: Joined content and inclusive index range;
            empty content when the target chunk does not exist
        """
        hard_limit = max_chars * tolerance

        with self._read("get_expanded_context") as session:

            def content_at(index: int) -> str | None:
                if index < 0:
                    return None
                return session.execute(
                    select(ChunkModel.content).where(
                        ChunkModel.doc_id == doc_id,
                        ChunkModel.chunk_index == index,
                    )
                ).scalar_one_or_none()

            target = content_at(chunk_index)
            if target is None:
                return ExpandedContext(content="", start_index=chunk_index, end_index=chunk_index)

            parts = [target]
            length = len(target)
            start = end = chunk_index

            if direction in ("before", "both"):
                while length < max_chars:
                    neighbour = content_at(start - 1)
                    if neighbour is None or length + 1 + len(neighbour) > hard_limit:
                        break
                    parts.insert(0, neighbour)
                    length += 1 + len(neighbour)
                    start -= 1

            if direction in ("after", "both"):
                while length < max_chars:
                    neighbour = content_at(end + 1)
                    if neighbour is None or length + 1 + len(neighbour) > hard_limit:
                        break
                    parts.append(neighbour)
                    length += 1 + len(neighbour)
                    end += 1

        return ExpandedContext(content="\n".join(parts), start_index=start, end_index=end)

    # ------------------------------------------------------------------
    # Maintenance
    # ------------------------------------------------------------------

    def checkpoint(self) -> None:
        """
        Flush the write-ahead log into the database file and truncate it.

        Raises:
            StorageError: If the checkpoint fails
        """
        with self._storage_errors("checkpoint"):
            with self._engine.connect() as conn:
                busy, log_frames, checkpointed = conn.exec_driver_sql(
                    "PRAGMA wal_checkpoint(TRUNCATE)"
                ).one()
        if busy:
            logger.warning(
                f"{__name__}:checkpoint - Checkpoint incomplete, readers active "
                f"({checkpointed}/{log_frames} frames)"
            )
        else:
            logger.debug(f"{__name__}:checkpoint - WAL checkpointed")

    def _sync_vector_index(self, session: Session) -> tuple[int, int]:
        """
        Make the vector index hold exactly the stored embeddings.

        Returns:
            tuple[int, int]: Stale index rows removed, missing rows re-added
        """
        indexed = set(session.execute(text(f"SELECT chunk_rowid FROM {VEC_TABLE}")).scalars())
        stored = dict(
            session.execute(
                text(
                    "SELECT c.rowid, e.embedding FROM embeddings AS e "
                    "JOIN chunks AS c ON c.id = e.chunk_id"
                )
            ).all()
        )

        stale = sorted(indexed - stored.keys())
        _drop_vectors(session, stale)

        missing = sorted(stored.keys() - indexed)
        if missing:
            session.execute(
                text(f"INSERT INTO {VEC_TABLE}(chunk_rowid, embedding) VALUES (:rowid, :embedding)"),
                [{"rowid": rowid, "embedding": stored[rowid]} for rowid in missing],
            )
        return len(stale), len(missing)

    def repair(self) -> RepairReport:
        """
        Remove orphaned and invalid rows and resync the vector index.

        Embeddings are checked first, so the index is rebuilt only from
        valid vectors of chunks that still exist.

        Returns:
            RepairReport: Counts of removed rows by category
        """
        with self._transaction("repair") as session:
            orphaned_embeddings = session.execute(
                delete(EmbeddingModel).where(
                    ~select(ChunkModel.id)
                    .where(ChunkModel.id == EmbeddingModel.chunk_id)
                    .correlate(EmbeddingModel)
                    .exists()
                ),
                execution_options={"synchronize_session": False},
            ).rowcount

            invalid_ids = [
                row.chunk_id
                for row in session.execute(select(EmbeddingModel.chunk_id, EmbeddingModel.embedding))
                if not is_valid_blob(row.embedding, self.dimension)
            ]
            if invalid_ids:
                session.execute(
                    delete(EmbeddingModel).where(EmbeddingModel.chunk_id.in_(invalid_ids)),
                    execution_options={"synchronize_session": False},
                )

            orphaned_chunks = session.execute(
                delete(ChunkModel).where(
                    ~select(DocumentModel.id)
                    .where(DocumentModel.id == ChunkModel.doc_id)
                    .correlate(ChunkModel)
                    .exists()
                ),
                execution_options={"synchronize_session": False},
            ).rowcount

            stale_vectors, reindexed_vectors = self._sync_vector_index(session)

        report = RepairReport(
            orphaned_chunks=orphaned_chunks,
            orphaned_embeddings=orphaned_embeddings,
            invalid_embeddings=len(invalid_ids),
            stale_vectors=stale_vectors,
            reindexed_vectors=reindexed_vectors,
        )
        logger.info(f"{__name__}:repair - {report.model_dump()}")
        return report

    def close(self) -> None:
        self._engine.dispose()
