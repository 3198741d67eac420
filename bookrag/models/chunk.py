"""
Chunk and page domain models.

A Chunk is the unit of indexing and citation: a bounded passage of one
page of one book. Pages and books come from the external catalog.

Dependencies: pydantic
System role: Ingestion data structures
"""

import hashlib

from pydantic import BaseModel, ConfigDict, Field


class BookRecord(BaseModel):
    """Book metadata supplied by the catalog, used for filters and citations."""

    book_id: str = Field(description="Book identifier")
    title: str = Field(description="Book title")
    author: str | None = Field(default=None, description="Author name")
    category: str | None = Field(default=None, description="Category used for search filters")


class PageRecord(BaseModel):
    """
    Raw page content supplied by the catalog for ingestion.

    ``text`` may be bytes straight from storage; the chunker decodes it.
    """

    book_id: str
    page_number: int = Field(ge=0)
    text: str | bytes
    chapter_title: str | None = None
    section_title: str | None = None


class Chunk(BaseModel):
    """
    Bounded passage of source text with provenance.

    Frozen: embedding produces a copy via ``with_vector`` rather than
    mutating the original.
    """

    model_config = ConfigDict(frozen=True)

    book_id: str = Field(description="Owning book")
    page_number: int = Field(ge=0, description="Owning page")
    chunk_index: int = Field(ge=0, description="Position of the chunk within its page")
    text: str = Field(description="Normalized passage text")
    token_count: int = Field(ge=0, description="Number of tokens in text")
    chapter_title: str | None = Field(default=None)
    section_title: str | None = Field(default=None)
    book_title: str | None = Field(default=None)
    category: str | None = Field(default=None)
    vector_id: str | None = Field(default=None, description="Set once the chunk is embedded")
    is_processed: bool = Field(default=False)

    @property
    def chunk_id(self) -> str:
        """Stable identity derived from (book, page, chunk index)."""
        return f"{self.book_id}:{self.page_number}:{self.chunk_index}"

    @property
    def title_text(self) -> str:
        """Title fields concatenated for keyword title boosting."""
        parts = [self.book_title, self.chapter_title, self.section_title]
        return " ".join(part for part in parts if part)

    def with_vector(self, model_version: str) -> "Chunk":
        """
        Return a processed copy carrying a deterministic vector id.

        Args:
            model_version: Embedding model identifier

        Returns:
            Chunk: Copy with vector_id set and is_processed=True
        """
        digest = hashlib.sha256(f"{self.chunk_id}:{model_version}".encode()).hexdigest()[:16]
        return self.model_copy(update={"vector_id": digest, "is_processed": True})

    def metadata(self) -> dict:
        """Flat metadata stored next to the vector or keyword entry."""
        return {
            "chunk_id": self.chunk_id,
            "book_id": self.book_id,
            "page_number": self.page_number,
            "chunk_index": self.chunk_index,
            "token_count": self.token_count,
            "chapter_title": self.chapter_title,
            "section_title": self.section_title,
            "book_title": self.book_title,
            "category": self.category,
            "vector_id": self.vector_id,
            "is_processed": self.is_processed,
        }

    @classmethod
    def from_metadata(cls, text: str, metadata: dict) -> "Chunk":
        """Rebuild a chunk from stored text and metadata."""
        return cls(
            book_id=metadata["book_id"],
            page_number=metadata["page_number"],
            chunk_index=metadata["chunk_index"],
            text=text,
            token_count=metadata.get("token_count", 0),
            chapter_title=metadata.get("chapter_title"),
            section_title=metadata.get("section_title"),
            book_title=metadata.get("book_title"),
            category=metadata.get("category"),
            vector_id=metadata.get("vector_id"),
            is_processed=metadata.get("is_processed", False),
        )
