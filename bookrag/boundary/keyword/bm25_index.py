"""
BM25 keyword index.

Scores chunks with BM25Okapi over two fields, content and title
(book/chapter/section), combined as ``content + title_boost * title``.
Only chunks containing at least one query term are returned. Filters are
applied to the corpus before ranking. The BM25 statistics are rebuilt
whenever the corpus changes.

Dependencies: rank_bm25, numpy
System role: Keyword search backend
"""

import logging
import re
import threading

import numpy as np
from pydantic import BaseModel, Field
from rank_bm25 import BM25Okapi

from bookrag.models.chunk import Chunk

logger = logging.getLogger(__name__)

_NON_WORD = re.compile(r"[^\w\s]")


def tokenize_for_bm25(text: str) -> list[str]:
    """
    Tokenize text for BM25 lexical search.

    Lowercases, replaces punctuation with spaces and splits on whitespace.
    """
    if not text:
        return []
    return _NON_WORD.sub(" ", text.lower()).split()


class KeywordSearchResult(BaseModel):
    """Single result from keyword search."""

    chunk: Chunk = Field(description="Stored chunk")
    score: float = Field(description="Boosted BM25 score")


class BM25KeywordIndex:
    """In-process BM25 index keyed by chunk id."""

    def __init__(self, title_boost: float = 2.0) -> None:
        """
        Initialize an empty index.

        Args:
            title_boost: Weight of title-field scores relative to content
        """
        self.title_boost = title_boost
        self._lock = threading.Lock()
        self._chunks: dict[str, Chunk] = {}
        self._order: list[str] = []
        self._content_tokens: list[list[str]] = []
        self._content_bm25: BM25Okapi | None = None
        self._title_bm25: BM25Okapi | None = None

    def _rebuild(self) -> None:
        # Caller holds the lock.
        self._order = list(self._chunks)
        self._content_tokens = [tokenize_for_bm25(self._chunks[cid].text) for cid in self._order]
        title_tokens = [tokenize_for_bm25(self._chunks[cid].title_text) for cid in self._order]

        self._content_bm25 = BM25Okapi(self._content_tokens) if any(self._content_tokens) else None
        self._title_bm25 = BM25Okapi(title_tokens) if any(title_tokens) else None

    def add(self, chunks: list[Chunk]) -> list[str]:
        """Insert or replace chunks and rebuild statistics."""
        if not chunks:
            return []
        with self._lock:
            for chunk in chunks:
                self._chunks[chunk.chunk_id] = chunk
            self._rebuild()
        logger.info(f"{__name__}:add - Indexed {len(chunks)} chunks", extra={"corpus_size": len(self._chunks)})
        return [chunk.chunk_id for chunk in chunks]

    def delete_book(self, book_id: str) -> int:
        with self._lock:
            doomed = [cid for cid, chunk in self._chunks.items() if chunk.book_id == book_id]
            for cid in doomed:
                del self._chunks[cid]
            if doomed:
                self._rebuild()
        return len(doomed)

    def search(
        self,
        query: str,
        k: int,
        filters: dict[str, str] | None = None,
    ) -> list[KeywordSearchResult]:
        """
        Rank chunks matching the query.

        Args:
            query: Raw query text
            k: Number of results to return
            filters: Exact-match metadata filters applied before ranking

        Returns:
            list[KeywordSearchResult]: Results by descending boosted score
        """
        query_tokens = tokenize_for_bm25(query)
        if not query_tokens:
            return []

        with self._lock:
            if self._content_bm25 is None and self._title_bm25 is None:
                return []

            eligible = [
                position for position, cid in enumerate(self._order)
                if all(self._chunks[cid].metadata().get(key) == value for key, value in (filters or {}).items())
            ]
            if not eligible:
                return []

            scores = np.zeros(len(self._order))
            if self._content_bm25 is not None:
                scores += self._content_bm25.get_scores(query_tokens)
            if self._title_bm25 is not None:
                scores += self.title_boost * self._title_bm25.get_scores(query_tokens)

            terms = set(query_tokens)
            matching = [
                position for position in eligible
                if terms.intersection(self._content_tokens[position])
                or terms.intersection(tokenize_for_bm25(self._chunks[self._order[position]].title_text))
            ]
            # Stable on ties: earlier-indexed chunks first.
            ranked = sorted(matching, key=lambda position: -scores[position])[:k]
            return [
                KeywordSearchResult(chunk=self._chunks[self._order[position]], score=float(scores[position]))
                for position in ranked
            ]

    def count(self) -> int:
        with self._lock:
            return len(self._chunks)
