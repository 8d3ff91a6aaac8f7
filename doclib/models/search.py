"""
Search domain models.

Options, results and expanded context windows for retrieval.

Dependencies: pydantic
System role: Retrieval data contracts
"""

from typing import Literal

from pydantic import BaseModel, Field

MatchType = Literal["vector", "fts", "hybrid"]
ExpandDirection = Literal["before", "after", "both"]


class SearchOptions(BaseModel):
    """Options accepted by search and full-text search."""

    limit: int = Field(default=10, ge=1, description="Maximum number of results")
    threshold: float = Field(
        default=0.3,
        ge=0.0,
        le=1.0,
        description="Minimum vector similarity",
    )
    tags: list[str] | None = Field(default=None, description="Only documents carrying any of these tags")
    hybrid: bool = Field(default=True, description="Also run full-text search")
    expand_chars: int = Field(default=0, ge=0, description="Context expansion budget (0 disables)")


class ExpandedContext(BaseModel):
    """Contiguous window of chunks within one document."""

    content: str = Field(description="Chunks joined with newlines")
    start_index: int = Field(description="First chunk index in the window")
    end_index: int = Field(description="Last chunk index in the window (inclusive)")

    def covers(self, chunk_index: int) -> bool:
        """Whether the window contains the given chunk index."""
        return self.start_index <= chunk_index <= self.end_index


class SearchResult(BaseModel):
    """A single ranked search hit."""

    doc_id: str = Field(description="Document id")
    title: str = Field(description="Document title")
    page: int = Field(description="Page or section number")
    chunk_index: int = Field(description="Chunk index within the document")
    content: str = Field(description="Chunk text")
    score: float = Field(description="Similarity or relevance, roughly 0..1")
    match_type: MatchType = Field(description="Which index produced the hit")
    expanded_content: str | None = Field(default=None, description="Surrounding context")
    expanded_range: tuple[int, int] | None = Field(
        default=None,
        description="Inclusive chunk index range of expanded_content",
    )

    @property
    def key(self) -> tuple[str, int, int]:
        """Identity used to merge hits across indexes."""
        return (self.doc_id, self.page, self.chunk_index)
