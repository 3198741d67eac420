"""
Retrieval value objects.

Per-request search configuration, ranked candidates from each signal,
fused candidates and the source references cited in answers.

Dependencies: pydantic
System role: Retrieval data structures (ephemeral, never persisted)
"""

from enum import Enum

from pydantic import BaseModel, Field

from bookrag.models.chunk import Chunk


class SignalSource(str, Enum):
    """Retrieval signal a candidate came from."""

    VECTOR = "vector"
    KEYWORD = "keyword"


class SearchContext(BaseModel):
    """Per-request search configuration."""

    top_k: int = Field(default=5, ge=1, le=50, description="Passages kept after reranking")
    similarity_threshold: float = Field(
        default=0.0,
        ge=0.0,
        le=1.0,
        description="Minimum cosine similarity for vector candidates",
    )
    book_id: str | None = Field(default=None, description="Restrict search to one book")
    category: str | None = Field(default=None, description="Restrict search to one category")

    def filters(self) -> dict[str, str]:
        """Active metadata filters (book_id, category) as a dict."""
        active: dict[str, str] = {}
        if self.book_id:
            active["book_id"] = self.book_id
        if self.category:
            active["category"] = self.category
        return active


class SearchCandidate(BaseModel):
    """One ranked hit from a single retrieval signal."""

    chunk_id: str
    raw_score: float
    source_signal: SignalSource
    chunk: Chunk


class FusedCandidate(BaseModel):
    """Candidate after rank fusion (and optionally reranking)."""

    chunk_id: str
    fused_score: float
    contributing_signals: list[SignalSource] = Field(default_factory=list)
    vector_rank: int | None = None
    keyword_rank: int | None = None
    chunk: Chunk
    rerank_score: float | None = None


class SourceReference(BaseModel):
    """Citation of a chunk used to ground an answer."""

    chunk_id: str = Field(description="Cited chunk identifier")
    book_id: str = Field(description="Book of the cited chunk")
    page_number: int = Field(description="Page of the cited chunk")
    chapter_title: str | None = Field(default=None)
    book_title: str | None = Field(default=None)

    @classmethod
    def from_chunk(cls, chunk: Chunk) -> "SourceReference":
        """Build a citation from the chunk's provenance."""
        return cls(
            chunk_id=chunk.chunk_id,
            book_id=chunk.book_id,
            page_number=chunk.page_number,
            chapter_title=chunk.chapter_title,
            book_title=chunk.book_title,
        )
