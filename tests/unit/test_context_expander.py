"""
Test suite for the context expander cache.

System role: Verification of per-search expansion reuse
"""

from unittest.mock import MagicMock

import pytest

from doclib.core.context_expander import ContextExpander
from doclib.models import ExpandedContext


@pytest.fixture
def mock_store() -> MagicMock:
    store = MagicMock()
    store.get_expanded_context.return_value = ExpandedContext(
        content="zero\none\ntwo", start_index=0, end_index=2
    )
    return store


class TestContextExpanderCache:
    """Test window reuse within one expander."""

    def test_reuses_window_covering_index(self, mock_store: MagicMock) -> None:
        """Should hit storage once for two chunks in the same window."""
        expander = ContextExpander(mock_store)

        first = expander.expand("doc1", 1, max_chars=100)
        second = expander.expand("doc1", 2, max_chars=100)

        assert mock_store.get_expanded_context.call_count == 1
        assert first == second

    def test_index_outside_cached_window_is_expanded(self, mock_store: MagicMock) -> None:
        """Should expand afresh when no cached window covers the index."""
        expander = ContextExpander(mock_store)
        expander.expand("doc1", 1)
        mock_store.get_expanded_context.return_value = ExpandedContext(
            content="nine\nten", start_index=9, end_index=10
        )

        result = expander.expand("doc1", 10)
        again = expander.expand("doc1", 9)

        assert mock_store.get_expanded_context.call_count == 2
        assert result.start_index == 9
        assert again == result

    def test_cache_is_per_document(self, mock_store: MagicMock) -> None:
        """Should not reuse another document's window."""
        expander = ContextExpander(mock_store)

        expander.expand("doc1", 1)
        expander.expand("doc2", 1)

        assert mock_store.get_expanded_context.call_count == 2

    def test_missing_target_not_cached(self, mock_store: MagicMock) -> None:
        """Should retry lookups whose target chunk did not exist."""
        mock_store.get_expanded_context.return_value = ExpandedContext(
            content="", start_index=5, end_index=5
        )
        expander = ContextExpander(mock_store)

        expander.expand("doc1", 5)
        expander.expand("doc1", 5)

        assert mock_store.get_expanded_context.call_count == 2

    def test_expanders_do_not_share_cache(self, mock_store: MagicMock) -> None:
        """Should keep caches scoped to one expander."""
        ContextExpander(mock_store).expand("doc1", 1)
        ContextExpander(mock_store).expand("doc1", 1)

        assert mock_store.get_expanded_context.call_count == 2

    def test_forwards_budget_direction_and_tolerance(self, mock_store: MagicMock) -> None:
        """Should pass expansion parameters to the store."""
        ContextExpander(mock_store, tolerance=1.5).expand("doc1", 1, max_chars=300, direction="after")

        mock_store.get_expanded_context.assert_called_once_with(
            "doc1", 1, max_chars=300, direction="after", tolerance=1.5
        )

    def test_cache_is_per_direction(self, mock_store: MagicMock) -> None:
        """Should not serve a before-only window to a request for both sides."""
        mock_store.get_expanded_context.return_value = ExpandedContext(
            content="zero\none", start_index=0, end_index=1
        )
        expander = ContextExpander(mock_store)

        expander.expand("doc1", 1, direction="before")
        expander.expand("doc1", 1, direction="both")
        expander.expand("doc1", 0, direction="before")

        assert mock_store.get_expanded_context.call_count == 2
        assert mock_store.get_expanded_context.call_args.kwargs["direction"] == "both"

    def test_cache_is_per_budget(self, mock_store: MagicMock) -> None:
        """Should expand again when a larger budget is requested."""
        expander = ContextExpander(mock_store)

        expander.expand("doc1", 1, max_chars=100)
        expander.expand("doc1", 1, max_chars=2000)

        assert mock_store.get_expanded_context.call_count == 2
