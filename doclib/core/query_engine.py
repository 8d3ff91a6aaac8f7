"""
Hybrid query engine.

Runs vector similarity and full-text search, merges hits that appear
in both with a score boost, ranks, truncates and optionally expands
each hit with surrounding context.

Dependencies: doclib.boundary, doclib.core.context_expander
System role: Query path orchestration
"""

import logging
from collections.abc import Callable

from doclib.boundary.db.index_store import IndexStore
from doclib.boundary.embedding.base import EmbeddingClient
from doclib.core.context_expander import ContextExpander
from doclib.core.exceptions import EmbeddingError
from doclib.models import SearchOptions, SearchResult

logger = logging.getLogger(__name__)


def merge_results(
    primary: list[SearchResult],
    secondary: list[SearchResult],
    hybrid_boost: float = 1.2,
) -> list[SearchResult]:
    """
    Merge full-text hits into vector hits.

    A secondary hit with the same (doc_id, page, chunk_index) as an
    existing hit replaces it with a boosted copy (score capped at 1.0,
    match_type "hybrid"); otherwise it is appended.

    Args:
        primary: Vector hits
        secondary: Full-text hits
        hybrid_boost: Multiplier applied to the existing score

    Returns:
        list[SearchResult]: Deduplicated hits, not yet sorted
    """
    merged = list(primary)
    positions = {result.key: i for i, result in enumerate(merged)}

    for result in secondary:
        position = positions.get(result.key)
        if position is None:
            positions[result.key] = len(merged)
            merged.append(result)
            continue
        existing = merged[position]
        merged[position] = existing.model_copy(
            update={
                "score": min(1.0, existing.score * hybrid_boost),
                "match_type": "hybrid",
            }
        )
    return merged


class QueryEngine:
    """
    Hybrid search over the index store.

    Usage:
        engine = QueryEngine(store, embedder)
        results = engine.search("react hooks", SearchOptions(limit=5, expand_chars=1500))
    """

    def __init__(
        self,
        store: IndexStore,
        embedder: EmbeddingClient,
        expander_factory: Callable[[], ContextExpander] | None = None,
        hybrid_boost: float = 1.2,
    ) -> None:
        """
        Initialize query engine.

        Args:
            store: Index store for vector and full-text queries
            embedder: Client used to embed the query
            expander_factory: Builds a fresh expander per search call
            hybrid_boost: Score multiplier for hits found by both indexes
        """
        self._store = store
        self._embedder = embedder
        self._expander_factory = expander_factory or (lambda: ContextExpander(store))
        self._hybrid_boost = hybrid_boost

    def _vector_results(self, query: str, options: SearchOptions) -> list[SearchResult] | None:
        """Vector hits, or None when the embedding service is unavailable."""
        try:
            self._embedder.check_health()
            query_vector = self._embedder.embed(query)
        except EmbeddingError as e:
            logger.warning(f"{__name__}:search - Embedding unavailable, falling back to full-text: {e}")
            return None

        return self._store.vector_search(
            query_vector,
            limit=options.limit,
            threshold=options.threshold,
            tags=options.tags,
        )

    def search(self, query: str, options: SearchOptions | None = None) -> list[SearchResult]:
        """
        Run a hybrid search.

        Args:
            query: Free-text query
            options: Limit, threshold, tag filter, hybrid flag, expansion budget

        Returns:
            list[SearchResult]: Ranked hits, best first, at most options.limit

        Raises:
            StorageError: If a storage query fails
        """
        options = options or SearchOptions()

        vector_hits = self._vector_results(query, options)
        results = vector_hits or []

        if options.hybrid or vector_hits is None:
            fts_hits = self._store.fts_search(query, limit=options.limit, tags=options.tags)
            results = merge_results(results, fts_hits, self._hybrid_boost)

        results = sorted(results, key=lambda r: r.score, reverse=True)[: options.limit]
        logger.info(
            f"{__name__}:search - '{query}' -> {len(results)} results "
            f"(vector={'off' if vector_hits is None else len(vector_hits)})"
        )

        if options.expand_chars > 0 and results:
            results = self._expand(results, options.expand_chars)
        return results

    def fts_search(self, query: str, options: SearchOptions | None = None) -> list[SearchResult]:
        """Full-text only search with the same ranking and expansion."""
        options = options or SearchOptions()
        results = self._store.fts_search(query, limit=options.limit, tags=options.tags)
        if options.expand_chars > 0 and results:
            results = self._expand(results, options.expand_chars)
        return results

    def _expand(self, results: list[SearchResult], max_chars: int) -> list[SearchResult]:
        expander = self._expander_factory()
        expanded = []
        for result in results:
            context = expander.expand(result.doc_id, result.chunk_index, max_chars=max_chars)
            expanded.append(
                result.model_copy(
                    update={
                        "expanded_content": context.content,
                        "expanded_range": (context.start_index, context.end_index),
                    }
                )
            )
        return expanded
