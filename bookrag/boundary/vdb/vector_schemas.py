"""
Vector database schemas.

Result model and the backend protocol shared by all vector stores.

Dependencies: pydantic
System role: Type definitions for vector operations
"""

from typing import Protocol

import numpy as np
from pydantic import BaseModel, Field

from bookrag.models.chunk import Chunk


class VectorSearchResult(BaseModel):
    """Single result from vector search."""

    chunk: Chunk = Field(description="Stored chunk")
    similarity_score: float = Field(description="Cosine similarity (-1.0-1.0)")


class VectorStore(Protocol):
    """Synchronous vector backend; clients call it from a thread pool."""

    def add(self, entries: list[tuple[Chunk, list[float]]]) -> list[str]:
        """Insert or replace entries keyed by chunk id."""
        ...

    def delete_book(self, book_id: str) -> int:
        """Remove every entry of a book, returning the count removed."""
        ...

    def similarity_search(
        self,
        embedding: list[float],
        k: int,
        filters: dict[str, str] | None = None,
    ) -> list[VectorSearchResult]:
        """Top-k entries by cosine similarity among those matching filters."""
        ...

    def count(self) -> int:
        ...


def normalize(vector: list[float]) -> np.ndarray:
    """L2-normalize a vector as float32 (zero vectors stay zero)."""
    array = np.asarray(vector, dtype=np.float32)
    norm = float(np.linalg.norm(array))
    if norm == 0.0:
        return array
    return array / norm
