"""
Dependency container.

Builds the store, embedder, engine and services from settings. Each
component is created lazily on first access and shared afterwards.

Dependencies: doclib.configs, doclib.application, doclib.boundary, doclib.core
System role: Constructor-based wiring for callers (CLI, scripts, tests)
"""

import logging

from sqlalchemy.engine import Engine

from doclib.application import IngestionService, LibraryService, shutdown_checkpoint
from doclib.boundary.db import IndexStore, create_sqlite_engine
from doclib.boundary.embedding import EmbeddingClient, OllamaEmbeddingClient
from doclib.configs import Settings, get_settings
from doclib.core.chunker import Chunker
from doclib.core.context_expander import ContextExpander
from doclib.core.query_engine import QueryEngine
from doclib.models import SearchOptions
from doclib.observability import configure_logging

logger = logging.getLogger(__name__)


class Container:
    """
    Container for shared service instances.

    Usage:
        with Container() as container:
            container.library.add("notes.md")
            results = container.library.search("hooks")
    """

    def __init__(
        self,
        settings: Settings | None = None,
        engine: Engine | None = None,
        embedder: EmbeddingClient | None = None,
    ) -> None:
        """
        Initialize container.

        Args:
            settings: Application settings (default: get_settings())
            engine: Pre-built engine (default: from library/database settings)
            embedder: Pre-built embedding client (default: Ollama from settings)
        """
        self.settings = settings or get_settings()
        self._engine = engine
        self._embedder = embedder
        self._store: IndexStore | None = None
        self._query_engine: QueryEngine | None = None
        self._library: LibraryService | None = None
        self._ingestion: IngestionService | None = None

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            self._engine = create_sqlite_engine(
                self.settings.library.resolved_db_path,
                busy_timeout_ms=self.settings.database.busy_timeout_ms,
                echo=self.settings.database.echo_sql,
            )
        return self._engine

    @property
    def store(self) -> IndexStore:
        if self._store is None:
            self._store = IndexStore(self.engine, self.settings.embedding.dimension)
        return self._store

    @property
    def embedder(self) -> EmbeddingClient:
        if self._embedder is None:
            self._embedder = OllamaEmbeddingClient.from_settings(self.settings.embedding)
        return self._embedder

    @property
    def query_engine(self) -> QueryEngine:
        if self._query_engine is None:
            search = self.settings.search
            store = self.store
            self._query_engine = QueryEngine(
                store,
                self.embedder,
                expander_factory=lambda: ContextExpander(store, tolerance=search.expand_tolerance),
                hybrid_boost=search.hybrid_boost,
            )
        return self._query_engine

    @property
    def library(self) -> LibraryService:
        if self._library is None:
            ingestion = self.settings.ingestion
            self._library = LibraryService(
                self.store,
                self.embedder,
                self.query_engine,
                Chunker(ingestion.chunk_size, ingestion.chunk_overlap),
                embedding_concurrency=self.settings.embedding.concurrency,
                library_path=self.settings.library.library_path.expanduser(),
                default_search=self.default_search_options(),
            )
        return self._library

    def default_search_options(self) -> SearchOptions:
        search = self.settings.search
        return SearchOptions(
            limit=search.limit,
            threshold=search.threshold,
            hybrid=search.hybrid,
            expand_chars=search.default_expand_chars,
        )

    @property
    def ingestion(self) -> IngestionService:
        if self._ingestion is None:
            self._ingestion = IngestionService(
                self.library,
                checkpoint_interval=self.settings.ingestion.checkpoint_interval,
            )
        return self._ingestion

    def close(self) -> None:
        """Checkpoint (bounded by the shutdown timeout) and release resources."""
        if self._store is not None:
            shutdown_checkpoint(self._store, self.settings.ingestion.shutdown_checkpoint_timeout)
            self._store.close()
        if self._embedder is not None:
            self._embedder.close()
        logger.info(f"{__name__}:close - Container closed")

    def __enter__(self) -> "Container":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


def create_container(
    settings: Settings | None = None,
    engine: Engine | None = None,
    embedder: EmbeddingClient | None = None,
) -> Container:
    """
    Configure logging and build a container.

    Args:
        settings: Application settings (default: get_settings())
        engine: Pre-built engine
        embedder: Pre-built embedding client

    Returns:
        Container: Ready-to-use container
    """
    settings = settings or get_settings()
    configure_logging(settings.log_level)
    logger.info(f"{__name__}:create_container - Environment: {settings.environment}")
    return Container(settings, engine=engine, embedder=embedder)
