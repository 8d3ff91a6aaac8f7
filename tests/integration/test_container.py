"""
Test suite for the dependency container.

System role: Verification of settings-driven wiring
"""

from pathlib import Path

import pytest

from doclib.boundary.embedding import OllamaEmbeddingClient
from doclib.configs import EmbeddingSettings, LibrarySettings, SearchSettings, Settings
from doclib.dependencies import Container, create_container


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        library=LibrarySettings(library_path=tmp_path / "lib"),
        embedding=EmbeddingSettings(dimension=64),
        search=SearchSettings(limit=3, threshold=0.1, default_expand_chars=500),
    )


class TestContainer:
    """Test lazy wiring from settings."""

    def test_wires_services(self, settings: Settings, fake_embedder, markdown_file: Path, tmp_path: Path) -> None:
        with Container(settings, embedder=fake_embedder) as container:
            doc = container.library.add(markdown_file)
            results = container.library.fts_search("hooks")

            assert container.store.dimension == 64
            assert container.library.get(doc.id).title == "react-notes"
            assert results[0].expanded_content is not None

        assert (tmp_path / "lib" / "library.db").exists()
        assert fake_embedder.closed

    def test_components_are_shared(self, settings: Settings, fake_embedder) -> None:
        container = Container(settings, embedder=fake_embedder)

        assert container.store is container.store
        assert container.ingestion is container.ingestion
        container.close()

    def test_default_search_options(self, settings: Settings, fake_embedder) -> None:
        options = Container(settings, embedder=fake_embedder).default_search_options()

        assert (options.limit, options.threshold, options.expand_chars) == (3, 0.1, 500)

    def test_default_embedder_is_ollama(self, settings: Settings) -> None:
        container = Container(settings)

        assert isinstance(container.embedder, OllamaEmbeddingClient)
        container.close()

    def test_create_container_configures_logging(self, settings: Settings, fake_embedder) -> None:
        container = create_container(settings, embedder=fake_embedder)

        assert container.settings is settings
        container.close()
