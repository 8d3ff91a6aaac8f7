"""
Context expander.

Grows a character-budgeted window of neighbouring chunks around a hit
and remembers windows already computed during one search, so several
hits in the same region of a document cost one storage round trip.

Dependencies: doclib.boundary.db.index_store
System role: Optional last stage of the query path
"""

import logging

from doclib.boundary.db.index_store import IndexStore
from doclib.models import ExpandDirection, ExpandedContext

logger = logging.getLogger(__name__)


class ContextExpander:
    """
    Per-search context expansion with a window cache.

    Create one expander per search call; the cache is never shared
    across searches, so newly ingested chunks are always visible.
    """

    def __init__(self, store: IndexStore, tolerance: float = 1.2) -> None:
        """
        Initialize expander.

        Args:
            store: Index store providing get_expanded_context
            tolerance: Overshoot factor on the character budget
        """
        self._store = store
        self._tolerance = tolerance
        self._cache: dict[tuple[str, ExpandDirection, int], list[ExpandedContext]] = {}

    def expand(
        self,
        doc_id: str,
        chunk_index: int,
        max_chars: int = 2000,
        direction: ExpandDirection = "both",
    ) -> ExpandedContext:
        """
        Expand a chunk into its surrounding context.

        A window already computed for the same document, direction and
        budget is reused when it contains chunk_index; otherwise the
        chunk is expanded afresh and the new window is cached too.

        Args:
            doc_id: Document id
            chunk_index: Target chunk index
            max_chars: Character budget
            direction: "before", "after" or "both"

        Returns:
            ExpandedContext: Window content and inclusive range
        """
        windows = self._cache.setdefault((doc_id, direction, max_chars), [])
        for window in windows:
            if window.covers(chunk_index):
                logger.debug(
                    f"{__name__}:expand - Cache hit {doc_id}[{chunk_index}] in "
                    f"[{window.start_index}, {window.end_index}]"
                )
                return window

        window = self._store.get_expanded_context(
            doc_id,
            chunk_index,
            max_chars=max_chars,
            direction=direction,
            tolerance=self._tolerance,
        )
        # Missing targets come back empty and are not worth caching
        if window.content:
            windows.append(window)
        return window
