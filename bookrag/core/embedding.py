"""
Embedder with caching, retry and bounded batch concurrency.

Vectors are a pure function of (text, model version), so they are cached
under that key. Provider failures become EmbeddingProviderUnavailable and
are retried with exponential backoff before propagating.

Dependencies: langchain_core, tenacity, bookrag.core.cache
System role: Text to vector conversion for ingestion and queries
"""

import asyncio
import logging

from langchain_core.embeddings import Embeddings
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from bookrag.core.cache import TTLCache, make_cache_key
from bookrag.core.exceptions import EmbeddingProviderUnavailable
from bookrag.models.chunk import Chunk

logger = logging.getLogger(__name__)


class Embedder:
    """Cached, retrying front for an embeddings provider."""

    def __init__(
        self,
        provider: Embeddings,
        cache: TTLCache[list[float]],
        model_version: str,
        max_attempts: int = 3,
        backoff_multiplier: float = 1.0,
        max_concurrency: int = 4,
    ) -> None:
        """
        Initialize embedder.

        Args:
            provider: LangChain embeddings implementation
            cache: Embedding cache (text, model version) -> vector
            model_version: Model identifier, part of the cache key
            max_attempts: Attempts per text before giving up
            backoff_multiplier: Exponential backoff base in seconds
            max_concurrency: In-flight provider calls during batch embedding
        """
        self._provider = provider
        self._cache = cache
        self.model_version = model_version
        self._max_attempts = max_attempts
        self._backoff_multiplier = backoff_multiplier
        self._semaphore = asyncio.Semaphore(max_concurrency)

    def _cache_key(self, text: str) -> str:
        return make_cache_key("embedding", self.model_version, text)

    async def _call_provider(self, text: str) -> list[float]:
        try:
            vector = await self._provider.aembed_query(text)
        except Exception as e:
            raise EmbeddingProviderUnavailable(
                f"Embedding provider call failed: {type(e).__name__}: {e}",
                details={"model_version": self.model_version},
            ) from e
        return [float(value) for value in vector]

    async def aembed_query(self, text: str) -> list[float]:
        """
        Embed one text (query or chunk).

        Args:
            text: Text to embed

        Returns:
            list[float]: Embedding vector

        Raises:
            EmbeddingProviderUnavailable: After all attempts failed
        """
        key = self._cache_key(text)
        cached = self._cache.get(key)
        if cached is not None:
            return cached

        retrying = AsyncRetrying(
            retry=retry_if_exception_type(EmbeddingProviderUnavailable),
            stop=stop_after_attempt(self._max_attempts),
            wait=wait_exponential(multiplier=self._backoff_multiplier, max=10),
            before_sleep=lambda retry_state: logger.warning(
                f"{__name__}:aembed_query - Retry {retry_state.attempt_number}/{self._max_attempts}"
            ),
            reraise=True,
        )
        async for attempt in retrying:
            with attempt:
                vector = await self._call_provider(text)

        self._cache.set(key, vector)
        return vector

    async def _embed_bounded(self, text: str) -> list[float]:
        async with self._semaphore:
            return await self.aembed_query(text)

    async def aembed_chunks(self, chunks: list[Chunk]) -> list[tuple[Chunk, list[float]]]:
        """
        Embed chunks concurrently, capped by the embedder's semaphore.

        Args:
            chunks: Chunks to embed

        Returns:
            list of (processed chunk, vector) in input order; each chunk is a
            copy carrying its vector_id

        Raises:
            EmbeddingProviderUnavailable: If any chunk could not be embedded
        """
        if not chunks:
            return []

        vectors = await asyncio.gather(*(self._embed_bounded(chunk.text) for chunk in chunks))
        logger.info(
            f"{__name__}:aembed_chunks - Embedded {len(chunks)} chunks",
            extra={"model_version": self.model_version},
        )
        return [
            (chunk.with_vector(self.model_version), vector)
            for chunk, vector in zip(chunks, vectors)
        ]
