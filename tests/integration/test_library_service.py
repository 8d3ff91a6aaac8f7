"""
Test suite for LibraryService.

Runs the full add/search/maintenance flow against a temporary SQLite
store with a deterministic in-process embedder.

System role: Verification of caller-facing library operations
"""

from pathlib import Path
from unittest.mock import patch

import pytest

from doclib.application import LibraryService
from doclib.core.exceptions import (
    DocumentExistsError,
    DocumentNotFoundError,
    EmbeddingError,
    ExtractionError,
    NotFoundError,
    StorageError,
)
from doclib.models import AddOptions, FileType, SearchOptions, document_id_for_path


def write(path: Path, content: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


# ============================================================================
# add
# ============================================================================


class TestAdd:
    """Test document ingestion."""

    def test_adds_markdown_document(self, library: LibraryService, markdown_file: Path) -> None:
        """Should store the document with one chunk and embedding per section."""
        doc = library.add(markdown_file, AddOptions(tags=["react"], metadata={"source": "notes"}))

        assert doc.id == document_id_for_path(markdown_file.resolve())
        assert doc.title == "react-notes"
        assert doc.file_type == FileType.MARKDOWN
        assert doc.page_count == 2
        assert doc.tags == ["react"]
        stats = library.stats()
        assert (stats.documents, stats.chunks, stats.embeddings) == (1, 2, 2)

    def test_chunk_pages_follow_sections(self, library: LibraryService, markdown_file: Path) -> None:
        """Should record the section number as the chunk page."""
        library.add(markdown_file)

        hooks = library.fts_search("hooks")
        classes = library.fts_search("lifecycle")

        assert (hooks[0].page, hooks[0].chunk_index) == (1, 0)
        assert (classes[0].page, classes[0].chunk_index) == (2, 1)

    def test_title_override(self, library: LibraryService, markdown_file: Path) -> None:
        assert library.add(markdown_file, AddOptions(title="React Notes")).title == "React Notes"

    def test_duplicate_path(self, library: LibraryService, markdown_file: Path) -> None:
        library.add(markdown_file)

        with pytest.raises(DocumentExistsError):
            library.add(markdown_file)

    def test_missing_file(self, library: LibraryService, tmp_path: Path) -> None:
        with pytest.raises(NotFoundError):
            library.add(tmp_path / "missing.md")

    def test_unsupported_type(self, library: LibraryService, tmp_path: Path) -> None:
        path = write(tmp_path / "notes.txt", "Plain text is not a supported format here.")

        with pytest.raises(ExtractionError, match="Unsupported"):
            library.add(path)

    def test_no_text(self, library: LibraryService, tmp_path: Path) -> None:
        path = write(tmp_path / "empty.md", "# Title only\n")

        with pytest.raises(ExtractionError, match="No text"):
            library.add(path)
        assert library.stats().documents == 0

    def test_unhealthy_embedder_writes_nothing(
        self, library: LibraryService, fake_embedder, markdown_file: Path
    ) -> None:
        """Should fail before any write when the service is down."""
        fake_embedder.healthy = False

        with pytest.raises(EmbeddingError):
            library.add(markdown_file)

        assert library.stats().documents == 0
        assert fake_embedder.embed_calls == []

    def test_embedding_failure_writes_nothing(
        self, library: LibraryService, fake_embedder, markdown_file: Path
    ) -> None:
        fake_embedder.fail_embedding = True

        with pytest.raises(EmbeddingError):
            library.add(markdown_file)

        stats = library.stats()
        assert (stats.documents, stats.chunks, stats.embeddings) == (0, 0, 0)

    def test_storage_failure_removes_document(self, library: LibraryService, store, markdown_file: Path) -> None:
        """Should delete the partially written document."""
        with patch.object(
            store,
            "add_embeddings",
            side_effect=StorageError("disk I/O error", operation="add_embeddings"),
        ):
            with pytest.raises(StorageError):
                library.add(markdown_file)

        doc_id = document_id_for_path(markdown_file.resolve())
        assert store.get_document(doc_id) is None
        assert store.count_chunks(doc_id) == 0


class TestIngest:
    """Test the non-raising add variant."""

    def test_success(self, library: LibraryService, markdown_file: Path) -> None:
        result = library.ingest(markdown_file)

        assert result.ok
        assert result.chunk_count == 2
        assert result.document.title == "react-notes"

    def test_failure(self, library: LibraryService, tmp_path: Path) -> None:
        result = library.ingest(tmp_path / "missing.pdf")

        assert not result.ok
        assert result.error_type == "NotFoundError"
        assert result.document is None

    def test_unexpected_error_is_reported(self, library: LibraryService, store, markdown_file: Path) -> None:
        """Should turn errors outside the library hierarchy into a failed result."""
        with patch.object(store, "add_chunks", side_effect=OSError("file vanished")):
            result = library.ingest(markdown_file)

        assert not result.ok
        assert (result.error, result.error_type) == ("file vanished", "OSError")
        assert store.get_document(document_id_for_path(markdown_file.resolve())) is None

    def test_unexpected_error_without_message(self, library: LibraryService, markdown_file: Path) -> None:
        with patch.object(library, "add", side_effect=RuntimeError()):
            result = library.ingest(markdown_file)

        assert (result.error, result.error_type) == ("RuntimeError", "RuntimeError")


# ============================================================================
# search
# ============================================================================


class TestSearch:
    """Test hybrid and full-text search through the service."""

    def test_hybrid_hit(self, library: LibraryService, markdown_file: Path) -> None:
        """Should mark chunks found by both indexes as hybrid."""
        library.add(markdown_file)

        results = library.search("hooks", SearchOptions(threshold=0.0))

        assert any(r.match_type == "hybrid" and "hooks" in r.content for r in results)
        assert all(0.0 <= r.score <= 1.0 for r in results)

    def test_degrades_to_fts(self, library: LibraryService, fake_embedder, markdown_file: Path) -> None:
        """Should still answer with full-text hits when the service is down."""
        library.add(markdown_file)
        fake_embedder.healthy = False

        results = library.search("hooks")

        assert len(results) == 1
        assert results[0].match_type == "fts"

    def test_fts_search_does_not_embed(self, library: LibraryService, fake_embedder, markdown_file: Path) -> None:
        library.add(markdown_file)
        calls = len(fake_embedder.embed_calls)

        results = library.fts_search("lifecycle")

        assert len(results) == 1
        assert len(fake_embedder.embed_calls) == calls

    def test_expansion(self, library: LibraryService, markdown_file: Path) -> None:
        """Should attach the surrounding chunks of the document."""
        library.add(markdown_file)

        results = library.fts_search("hooks", SearchOptions(expand_chars=2000))

        assert results[0].expanded_range == (0, 1)
        assert "hooks" in results[0].expanded_content
        assert "lifecycle" in results[0].expanded_content

    def test_tag_filter(self, library: LibraryService, markdown_file: Path) -> None:
        library.add(markdown_file, AddOptions(tags=["react"]))

        assert library.fts_search("hooks", SearchOptions(tags=["python"])) == []
        assert len(library.fts_search("hooks", SearchOptions(tags=["react"]))) == 1

    def test_no_matches(self, library: LibraryService, markdown_file: Path) -> None:
        library.add(markdown_file)

        assert library.fts_search("kubernetes") == []


# ============================================================================
# Maintenance
# ============================================================================


class TestManagement:
    """Test lookup, tagging, removal and maintenance."""

    def test_get_by_id_or_title(self, library: LibraryService, markdown_file: Path) -> None:
        doc = library.add(markdown_file)

        assert library.get(doc.id).id == doc.id
        assert library.get("react-notes").id == doc.id

    def test_get_by_partial_title(self, library: LibraryService, tmp_path: Path) -> None:
        """Should resolve a case-insensitive part of the title."""
        path = write(
            tmp_path / "papers" / "1706.03762.md",
            "# Attention\n\nScaled dot-product attention over queries and keys.\n",
        )
        doc = library.add(path, AddOptions(title="Attention Is All You Need"))

        assert library.get("attention").id == doc.id
        assert library.get("ALL YOU NEED").id == doc.id

    def test_get_by_id_prefix(self, library: LibraryService, markdown_file: Path) -> None:
        doc = library.add(markdown_file)

        assert library.get(doc.id[:6]).id == doc.id

    def test_remove_and_tag_by_partial_title(self, library: LibraryService, markdown_file: Path) -> None:
        doc = library.add(markdown_file)

        assert library.tag("REACT", ["frontend"]).tags == ["frontend"]
        assert library.remove("notes").id == doc.id
        assert library.stats().documents == 0

    def test_get_missing(self, library: LibraryService) -> None:
        with pytest.raises(DocumentNotFoundError):
            library.get("nothing")

    def test_get_blank_reference(self, library: LibraryService, markdown_file: Path) -> None:
        library.add(markdown_file)

        with pytest.raises(DocumentNotFoundError):
            library.get("  ")

    def test_tag_and_list(self, library: LibraryService, markdown_file: Path) -> None:
        doc = library.add(markdown_file)

        library.tag(doc.id, ["frontend", "react"])

        assert [d.id for d in library.list_documents(tag="frontend")] == [doc.id]
        assert library.list_documents(tag="backend") == []

    def test_remove(self, library: LibraryService, markdown_file: Path) -> None:
        doc = library.add(markdown_file)

        removed = library.remove("react-notes")

        assert removed.id == doc.id
        stats = library.stats()
        assert (stats.documents, stats.chunks, stats.embeddings) == (0, 0, 0)

    def test_stats_reports_library_path(self, library: LibraryService, tmp_path: Path) -> None:
        assert library.stats().library_path == str(tmp_path / "library")

    def test_repair_and_checkpoint(self, library: LibraryService, markdown_file: Path) -> None:
        library.add(markdown_file)

        library.checkpoint()

        assert library.repair().total == 0

    def test_check_ready(self, library: LibraryService, fake_embedder) -> None:
        library.check_ready()
        fake_embedder.healthy = False

        with pytest.raises(EmbeddingError):
            library.check_ready()

    def test_close(self, library: LibraryService, fake_embedder) -> None:
        library.close()

        assert fake_embedder.closed
