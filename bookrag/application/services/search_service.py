"""
Search service.

Non-streaming question answering: retrieve, build a search prompt, ask the
language model through its circuit breaker, and log usage. Successful
answers are cached by (normalized query, filters, top_k).

Dependencies: bookrag.core, bookrag.boundary.llm
System role: Search endpoint orchestration
"""

import asyncio
import logging
import time

from bookrag.boundary.llm.chat_provider import ChatProvider
from bookrag.core.cache import TTLCache, make_cache_key
from bookrag.core.exceptions import InvalidQuery, NoRelevantContext
from bookrag.core.generation.prompt_builder import NO_CONTEXT_MESSAGE, GenerationTask, PromptBuilder
from bookrag.core.resilience import GENERATION_FALLBACK_MESSAGE, CircuitBreaker
from bookrag.core.retrieval.hybrid import HybridRetriever, RetrievalResult, confidence_score
from bookrag.core.text import normalize_query, normalize_text
from bookrag.models.api import SearchRequest, SearchResponse
from bookrag.models.conversation import SearchLogEntry, SearchType
from bookrag.models.search import SearchContext
from bookrag.observability.log_utils import log_exception_with_context

logger = logging.getLogger(__name__)


class SearchService:
    """Answers one-shot questions over the indexed books."""

    def __init__(
        self,
        retriever: HybridRetriever,
        prompt_builder: PromptBuilder,
        provider: ChatProvider,
        breaker: CircuitBreaker,
        cache: TTLCache[SearchResponse],
        search_log=None,
        keyword_weight: float = 0.7,
        generation_timeout: float = 60.0,
    ) -> None:
        """
        Initialize search service.

        Args:
            retriever: Hybrid retrieval pipeline
            prompt_builder: Prompt builder
            provider: Chat provider for answers
            breaker: Circuit breaker guarding the provider
            cache: Search response cache
            search_log: Object with ``async log_search(entry)``; None disables logging
            keyword_weight: Fusion keyword weight (for confidence scaling)
            generation_timeout: Limit for one answer in seconds
        """
        self._retriever = retriever
        self._prompt_builder = prompt_builder
        self._provider = provider
        self._breaker = breaker
        self._cache = cache
        self._search_log = search_log
        self._keyword_weight = keyword_weight
        self._generation_timeout = generation_timeout

    async def search(self, request: SearchRequest) -> SearchResponse:
        """
        Answer a question with cited sources.

        Raises:
            InvalidQuery: If the query is empty after normalization
        """
        query = normalize_text(request.query)
        if not query:
            raise InvalidQuery("Query must not be empty", field="query")

        context = SearchContext(
            top_k=request.top_k,
            book_id=request.filters.book_id,
            category=request.filters.category,
        )
        key = make_cache_key("search", normalize_query(query), context.filters(), context.top_k)
        started = time.monotonic()

        cached = self._cache.get(key)
        if cached is not None:
            logger.info(f"{__name__}:search - Cache hit")
            await self._log(request, context, cached, started)
            return cached

        try:
            retrieval = await self._retriever.retrieve(query, context)
        except NoRelevantContext:
            logger.info(f"{__name__}:search - No relevant context")
            response = SearchResponse(
                answer=NO_CONTEXT_MESSAGE,
                sources=[],
                confidence=0.0,
                search_type=SearchType.NONE,
            )
            await self._log(request, context, response, started)
            return response

        response = await self._answer(query, retrieval)
        if not response.degraded and retrieval.vector_count > 0:
            self._cache.set(key, response)

        await self._log(request, context, response, started)
        return response

    async def _answer(self, query: str, retrieval: RetrievalResult) -> SearchResponse:
        prompt = self._prompt_builder.build(query, retrieval.passages, GenerationTask.SEARCH)

        try:
            answer = await self._breaker.call(
                lambda: asyncio.wait_for(
                    self._provider.ainvoke(
                        prompt.messages,
                        temperature=prompt.temperature,
                        max_tokens=prompt.max_tokens,
                    ),
                    timeout=self._generation_timeout,
                ),
                fallback=lambda: None,
            )
        except Exception as e:
            log_exception_with_context(logger, f"{__name__}:_answer - Generation failed", e)
            answer = None

        if answer is None:
            return SearchResponse(
                answer=GENERATION_FALLBACK_MESSAGE,
                sources=prompt.sources,
                confidence=0.0,
                degraded=True,
                search_type=retrieval.search_type,
            )

        return SearchResponse(
            answer=answer,
            sources=prompt.sources,
            confidence=confidence_score(prompt.passages, self._keyword_weight),
            search_type=retrieval.search_type,
        )

    async def _log(
        self,
        request: SearchRequest,
        context: SearchContext,
        response: SearchResponse,
        started: float,
    ) -> None:
        if self._search_log is None:
            return
        entry = SearchLogEntry(
            query=request.query,
            search_type=response.search_type,
            results_count=len(response.sources),
            response_time_ms=int((time.monotonic() - started) * 1000),
            filters_applied=context.filters(),
            user_id=request.user_id,
        )
        try:
            await self._search_log.log_search(entry)
        except Exception as e:
            log_exception_with_context(logger, f"{__name__}:_log - Failed to write search log", e)
