"""
Component container.

Builds every component once from settings and wires them together:
providers, indexes, breakers, caches, retrieval, generation and the
services the API uses. The FastAPI lifespan keeps one container on
``app.state``.

Dependencies: bookrag.configs, bookrag.boundary, bookrag.core
System role: Composition root
"""

import logging
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncEngine

from bookrag.application.services import ChatService, ConversationLocks, IngestionService, SearchService
from bookrag.boundary.catalog import BookCatalog, InMemoryBookCatalog
from bookrag.boundary.db.connection import create_all_tables, get_async_engine, get_async_session_factory
from bookrag.boundary.db.repository import ConversationRepository
from bookrag.boundary.embeddings import get_embedding_provider
from bookrag.boundary.keyword import get_keyword_index
from bookrag.boundary.llm import LLMRelevanceScorer, get_chat_provider
from bookrag.boundary.vdb import get_vector_store
from bookrag.configs.settings import Settings
from bookrag.core.cache import TTLCache
from bookrag.core.chunking import TextChunker
from bookrag.core.embedding import Embedder
from bookrag.core.generation import GenerationOrchestrator, PromptBuilder
from bookrag.core.resilience import LLM_DEPENDENCY, VECTOR_STORE_DEPENDENCY, BreakerRegistry
from bookrag.core.retrieval import HybridRetriever, KeywordIndexClient, Reranker, VectorIndexClient

logger = logging.getLogger(__name__)


@dataclass
class RagContainer:
    """Long-lived components shared by all requests."""

    settings: Settings
    engine: AsyncEngine
    repository: ConversationRepository
    breakers: BreakerRegistry
    vector_client: VectorIndexClient
    keyword_client: KeywordIndexClient
    orchestrator: GenerationOrchestrator
    ingestion_service: IngestionService
    search_service: SearchService
    chat_service: ChatService

    @classmethod
    def build(
        cls,
        settings: Settings,
        catalog: BookCatalog | None = None,
        engine: AsyncEngine | None = None,
    ) -> "RagContainer":
        """
        Build all components from settings.

        Args:
            settings: Application settings
            catalog: Book catalog (defaults to an empty in-memory catalog)
            engine: Database engine (defaults to one built from settings)
        """
        engine = engine or get_async_engine(settings.database)
        repository = ConversationRepository(get_async_session_factory(engine))
        breakers = BreakerRegistry(settings.resilience)

        embeddings = get_embedding_provider(settings.vector_store)
        embedder = Embedder(
            provider=embeddings,
            cache=TTLCache(settings.cache.embedding_ttl_seconds, settings.cache.embedding_max_entries),
            model_version=settings.vector_store.embedding_model,
            max_attempts=settings.vector_store.embedding_max_attempts,
            backoff_multiplier=settings.vector_store.embedding_backoff_multiplier,
            max_concurrency=settings.vector_store.embedding_max_concurrency,
        )

        retrieval = settings.retrieval
        vector_client = VectorIndexClient(
            store=get_vector_store(settings.vector_store, embeddings),
            embedder=embedder,
            breaker=breakers.get(VECTOR_STORE_DEPENDENCY),
            timeout_seconds=retrieval.vector_timeout_seconds,
        )
        keyword_client = KeywordIndexClient(
            index=get_keyword_index(retrieval),
            timeout_seconds=retrieval.keyword_timeout_seconds,
        )

        generation = settings.generation
        provider = get_chat_provider(generation)
        reranker = None
        if retrieval.rerank_enabled:
            scorer_provider = get_chat_provider(generation, generation.rerank_model_id) if generation.rerank_model_id else provider
            reranker = Reranker(
                scorer=LLMRelevanceScorer(scorer_provider),
                max_candidates=retrieval.rerank_max_candidates,
                min_candidates=retrieval.rerank_min_candidates,
                default_score=retrieval.rerank_default_score,
                max_concurrency=retrieval.rerank_max_concurrency,
            )

        retriever = HybridRetriever(
            vector_client=vector_client,
            keyword_client=keyword_client,
            reranker=reranker,
            candidate_pool_size=retrieval.candidate_pool_size,
            keyword_weight=retrieval.keyword_weight,
        )
        prompt_builder = PromptBuilder.from_settings(generation)
        llm_breaker = breakers.get(LLM_DEPENDENCY)
        orchestrator = GenerationOrchestrator(
            provider=provider,
            breaker=llm_breaker,
            persistence=repository,
            generation_timeout=generation.generation_timeout_seconds,
        )

        logger.info(
            f"{__name__}:build - Components ready",
            extra={
                "vector_store": settings.vector_store.store_type,
                "keyword_index": retrieval.keyword_index_type,
                "llm_provider": generation.provider,
                "rerank_enabled": retrieval.rerank_enabled,
            },
        )
        return cls(
            settings=settings,
            engine=engine,
            repository=repository,
            breakers=breakers,
            vector_client=vector_client,
            keyword_client=keyword_client,
            orchestrator=orchestrator,
            ingestion_service=IngestionService(
                catalog=catalog or InMemoryBookCatalog(),
                chunker=TextChunker(settings.chunking.chunk_size, settings.chunking.chunk_overlap),
                vector_client=vector_client,
                keyword_client=keyword_client,
            ),
            search_service=SearchService(
                retriever=retriever,
                prompt_builder=prompt_builder,
                provider=provider,
                breaker=llm_breaker,
                cache=TTLCache(settings.cache.search_ttl_seconds, settings.cache.search_max_entries),
                search_log=repository,
                keyword_weight=retrieval.keyword_weight,
                generation_timeout=generation.generation_timeout_seconds,
            ),
            chat_service=ChatService(
                repository=repository,
                retriever=retriever,
                prompt_builder=prompt_builder,
                orchestrator=orchestrator,
                locks=ConversationLocks(),
                top_k=retrieval.default_top_k,
                keyword_weight=retrieval.keyword_weight,
            ),
        )

    async def startup(self) -> None:
        await create_all_tables(self.engine)

    async def shutdown(self) -> None:
        await self.orchestrator.wait_idle()
        await self.engine.dispose()
