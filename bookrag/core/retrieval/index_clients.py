"""
Vector and keyword index clients.

Async fronts for the synchronous index backends. Backend calls run in the
thread pool under a per-signal time budget. A search that times out or
fails is logged as IndexUnavailable and yields an empty list, so one
failing signal degrades retrieval instead of aborting it.

Dependencies: fastapi.concurrency, bookrag.boundary, bookrag.core
System role: Retrieval signal clients
"""

import asyncio
import logging

from fastapi.concurrency import run_in_threadpool

from bookrag.boundary.keyword.bm25_index import BM25KeywordIndex
from bookrag.boundary.vdb.vector_schemas import VectorStore
from bookrag.core.embedding import Embedder
from bookrag.core.exceptions import IndexUnavailable
from bookrag.core.resilience import CircuitBreaker
from bookrag.models.chunk import Chunk
from bookrag.models.search import SearchCandidate, SearchContext, SignalSource
from bookrag.observability.log_utils import log_exception_with_context

logger = logging.getLogger(__name__)


def _log_unavailable(signal: SignalSource, error: Exception) -> None:
    unavailable = IndexUnavailable(
        f"{signal.value} search unavailable: {type(error).__name__}: {error}",
        signal=signal.value,
    )
    log_exception_with_context(
        logger,
        f"{__name__}:search - Signal skipped",
        unavailable,
        level=logging.WARNING,
        cause=type(error).__name__,
    )


class VectorIndexClient:
    """
    Embeds queries and searches the vector store.

    Store searches go through the vector-store circuit breaker; while it is
    open the signal is skipped without touching the store.
    """

    def __init__(
        self,
        store: VectorStore,
        embedder: Embedder,
        breaker: CircuitBreaker,
        timeout_seconds: float = 2.0,
    ) -> None:
        self._store = store
        self._embedder = embedder
        self._breaker = breaker
        self._timeout = timeout_seconds

    async def index(self, chunks: list[Chunk]) -> list[Chunk]:
        """
        Embed and store chunks.

        Returns:
            list[Chunk]: Processed copies carrying their vector ids

        Raises:
            EmbeddingProviderUnavailable: If embedding failed after retries
        """
        entries = await self._embedder.aembed_chunks(chunks)
        await run_in_threadpool(self._store.add, entries)
        return [chunk for chunk, _ in entries]

    async def delete_book(self, book_id: str) -> int:
        return await run_in_threadpool(self._store.delete_book, book_id)

    async def reindex_book(self, book_id: str, chunks: list[Chunk]) -> list[Chunk]:
        """
        Replace every stored chunk of a book.

        New chunks are embedded before the old generation is removed, so an
        embedding failure leaves the previous chunks searchable.
        """
        entries = await self._embedder.aembed_chunks(chunks)
        removed = await run_in_threadpool(self._store.delete_book, book_id)
        await run_in_threadpool(self._store.add, entries)
        logger.info(
            f"{__name__}:reindex_book - Replaced vectors",
            extra={"book_id": book_id, "removed": removed, "added": len(entries)},
        )
        return [chunk for chunk, _ in entries]

    async def search(self, query: str, top_k: int, context: SearchContext) -> list[SearchCandidate]:
        """
        Rank chunks by cosine similarity to the query.

        Args:
            query: Query text
            top_k: Candidates to request from the store
            context: Filters and similarity threshold

        Returns:
            list[SearchCandidate]: Best first; empty if the signal is unavailable
        """
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self._timeout
        filters = context.filters()

        try:
            embedding = await asyncio.wait_for(self._embedder.aembed_query(query), timeout=self._timeout)
            remaining = deadline - loop.time()
            if remaining <= 0:
                # Budget spent on the embedding; the store was never tried.
                raise TimeoutError("query embedding used the whole vector budget")

            results = await self._breaker.call(
                lambda: asyncio.wait_for(
                    run_in_threadpool(self._store.similarity_search, embedding, top_k, filters),
                    timeout=remaining,
                ),
                fallback=lambda: None,
            )
        except Exception as e:
            _log_unavailable(SignalSource.VECTOR, e)
            return []

        if results is None:
            logger.info(f"{__name__}:search - Vector store breaker open, skipping vector signal")
            return []

        candidates = [
            SearchCandidate(
                chunk_id=result.chunk.chunk_id,
                raw_score=result.similarity_score,
                source_signal=SignalSource.VECTOR,
                chunk=result.chunk,
            )
            for result in results
            if result.similarity_score >= context.similarity_threshold
        ]
        logger.info(
            f"{__name__}:search - Vector signal returned {len(candidates)} candidates",
            extra={"filters": filters},
        )
        return candidates


class KeywordIndexClient:
    """Searches the keyword index under a time budget."""

    def __init__(self, index: BM25KeywordIndex, timeout_seconds: float = 2.0) -> None:
        self._index = index
        self._timeout = timeout_seconds

    async def index(self, chunks: list[Chunk]) -> list[str]:
        return await run_in_threadpool(self._index.add, chunks)

    async def delete_book(self, book_id: str) -> int:
        return await run_in_threadpool(self._index.delete_book, book_id)

    async def reindex_book(self, book_id: str, chunks: list[Chunk]) -> list[str]:
        """Replace every indexed chunk of a book."""
        await run_in_threadpool(self._index.delete_book, book_id)
        return await run_in_threadpool(self._index.add, chunks)

    async def search(self, query: str, top_k: int, context: SearchContext) -> list[SearchCandidate]:
        """
        Rank chunks by boosted BM25 score.

        Returns:
            list[SearchCandidate]: Best first; empty if the signal is unavailable
        """
        try:
            results = await asyncio.wait_for(
                run_in_threadpool(self._index.search, query, top_k, context.filters()),
                timeout=self._timeout,
            )
        except Exception as e:
            _log_unavailable(SignalSource.KEYWORD, e)
            return []

        logger.info(f"{__name__}:search - Keyword signal returned {len(results)} candidates")
        return [
            SearchCandidate(
                chunk_id=result.chunk.chunk_id,
                raw_score=result.score,
                source_signal=SignalSource.KEYWORD,
                chunk=result.chunk,
            )
            for result in results
        ]
