"""
In-memory vector store.

Brute-force cosine scan over a numpy matrix. Filters are applied before
scoring. Suitable for development and small catalogs.

Dependencies: numpy
System role: Lightweight vector backend
"""

import logging
import threading

import numpy as np

from bookrag.boundary.vdb.vector_schemas import VectorSearchResult, normalize
from bookrag.models.chunk import Chunk

logger = logging.getLogger(__name__)


class InMemoryVectorStore:
    """Numpy-backed vector store keyed by chunk id."""

    def __init__(self, dimension: int) -> None:
        self._dimension = dimension
        self._lock = threading.Lock()
        self._chunks: dict[str, Chunk] = {}
        self._vectors: dict[str, np.ndarray] = {}

    def add(self, entries: list[tuple[Chunk, list[float]]]) -> list[str]:
        ids = []
        with self._lock:
            for chunk, vector in entries:
                if len(vector) != self._dimension:
                    raise ValueError(
                        f"Vector dimension {len(vector)} does not match store dimension {self._dimension}"
                    )
                self._chunks[chunk.chunk_id] = chunk
                self._vectors[chunk.chunk_id] = normalize(vector)
                ids.append(chunk.chunk_id)
        return ids

    def delete_book(self, book_id: str) -> int:
        with self._lock:
            doomed = [chunk_id for chunk_id, chunk in self._chunks.items() if chunk.book_id == book_id]
            for chunk_id in doomed:
                del self._chunks[chunk_id]
                del self._vectors[chunk_id]
        return len(doomed)

    def similarity_search(
        self,
        embedding: list[float],
        k: int,
        filters: dict[str, str] | None = None,
    ) -> list[VectorSearchResult]:
        with self._lock:
            candidates = [
                chunk for chunk in self._chunks.values()
                if all(chunk.metadata().get(key) == value for key, value in (filters or {}).items())
            ]
            if not candidates:
                return []
            matrix = np.vstack([self._vectors[chunk.chunk_id] for chunk in candidates])

        scores = matrix @ normalize(embedding)
        # Stable sort keeps insertion order among equal scores.
        order = np.argsort(-scores, kind="stable")[:k]
        return [
            VectorSearchResult(chunk=candidates[i], similarity_score=float(scores[i]))
            for i in order
        ]

    def count(self) -> int:
        with self._lock:
            return len(self._chunks)
