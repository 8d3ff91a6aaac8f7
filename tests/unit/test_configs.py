"""
Test suite for configuration settings.

System role: Verification of environment variable mapping and defaults
"""

from pathlib import Path

import pytest

from doclib.configs import (
    EmbeddingSettings,
    IngestionSettings,
    LibrarySettings,
    SearchSettings,
    Settings,
    get_settings,
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch):
    for name in (
        "OLLAMA_HOST",
        "OLLAMA_MODEL",
        "DOCLIB_LIBRARY_PATH",
        "DOCLIB_DB_PATH",
        "DOCLIB_LOG_LEVEL",
        "DOCLIB_ENVIRONMENT",
    ):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class TestBaseSettings:
    """Test library-wide environment and log level."""

    def test_defaults(self) -> None:
        settings = Settings()

        assert (settings.environment, settings.log_level) == ("development", "INFO")

    def test_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DOCLIB_ENVIRONMENT", "production")
        monkeypatch.setenv("DOCLIB_LOG_LEVEL", " debug ")

        settings = Settings()

        assert settings.environment == "production"
        assert settings.log_level == "DEBUG"

    def test_rejects_unknown_level(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DOCLIB_LOG_LEVEL", "verbose")

        with pytest.raises(ValueError):
            Settings()


class TestLibrarySettings:
    """Test library location resolution."""

    def test_default_db_path(self) -> None:
        settings = LibrarySettings()

        assert settings.resolved_db_path == Path("~/Documents/.pdf-library").expanduser() / "library.db"

    def test_library_path_from_env(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        monkeypatch.setenv("DOCLIB_LIBRARY_PATH", str(tmp_path))

        assert LibrarySettings().resolved_db_path == tmp_path / "library.db"

    def test_explicit_db_path_wins(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        monkeypatch.setenv("DOCLIB_LIBRARY_PATH", str(tmp_path / "lib"))
        monkeypatch.setenv("DOCLIB_DB_PATH", str(tmp_path / "other.db"))

        assert LibrarySettings().resolved_db_path == tmp_path / "other.db"


class TestEmbeddingSettings:
    """Test Ollama settings and aliases."""

    def test_defaults(self) -> None:
        settings = EmbeddingSettings()

        assert settings.host == "http://localhost:11434"
        assert settings.model == "mxbai-embed-large"
        assert settings.dimension == 1024
        assert settings.concurrency == 5

    def test_ollama_host_alias(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Should accept the conventional OLLAMA_HOST variable."""
        monkeypatch.setenv("OLLAMA_HOST", "http://gpu-box:11434")

        assert EmbeddingSettings().host == "http://gpu-box:11434"

    def test_prefixed_model(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DOCLIB_EMBEDDING_MODEL", "nomic-embed-text")

        assert EmbeddingSettings().model == "nomic-embed-text"

    def test_rejects_zero_dimension(self) -> None:
        with pytest.raises(ValueError):
            EmbeddingSettings(dimension=0)


class TestSearchAndIngestionSettings:
    """Test retrieval and ingestion defaults."""

    def test_search_defaults(self) -> None:
        settings = SearchSettings()

        assert (settings.limit, settings.threshold, settings.hybrid) == (10, 0.3, True)
        assert settings.hybrid_boost == 1.2
        assert settings.expand_tolerance == 1.2

    def test_search_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DOCLIB_SEARCH_LIMIT", "3")
        monkeypatch.setenv("DOCLIB_SEARCH_HYBRID", "false")

        settings = SearchSettings()

        assert settings.limit == 3
        assert settings.hybrid is False

    def test_ingestion_defaults(self) -> None:
        settings = IngestionSettings()

        assert (settings.chunk_size, settings.chunk_overlap) == (512, 50)
        assert settings.checkpoint_interval == 25


class TestGetSettings:
    """Test the cached settings accessor."""

    def test_is_cached(self) -> None:
        assert get_settings() is get_settings()

    def test_aggregates_sections(self) -> None:
        settings = get_settings()

        assert isinstance(settings, Settings)
        assert settings.embedding.dimension == 1024
        assert settings.search.limit == 10
