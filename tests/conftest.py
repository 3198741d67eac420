"""
Shared test fixtures and configuration for entire test suite.

Provides: chunk/candidate factories, SQLite-backed repository, offline
settings (fake providers, memory vector store)
Dependencies: pytest, sqlalchemy, aiosqlite
System role: Test infrastructure and fixture management
"""

from collections.abc import Callable

import pytest
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from bookrag.boundary.db.base import Base
from bookrag.boundary.db.connection import get_async_session_factory
from bookrag.boundary.db.repository import ConversationRepository
from bookrag.configs.cache import CacheSettings
from bookrag.configs.database import DatabaseSettings
from bookrag.configs.generation import GenerationSettings
from bookrag.configs.retrieval import RetrievalSettings
from bookrag.configs.settings import Settings
from bookrag.configs.vector_store import VectorStoreSettings
from bookrag.models.chunk import Chunk
from bookrag.models.search import FusedCandidate, SearchCandidate, SignalSource


def _make_chunk(
    book_id: str = "book-1",
    page_number: int = 1,
    chunk_index: int = 0,
    text: str = "the quick brown fox jumps over the lazy dog",
    **fields,
) -> Chunk:
    return Chunk(
        book_id=book_id,
        page_number=page_number,
        chunk_index=chunk_index,
        text=text,
        token_count=len(text.split()),
        **fields,
    )


@pytest.fixture
def make_chunk() -> Callable[..., Chunk]:
    """Factory for chunks with sensible defaults."""
    return _make_chunk


@pytest.fixture
def make_candidate() -> Callable[..., SearchCandidate]:
    """Factory for single-signal candidates keyed by a short name (C1, C2...)."""

    def factory(name: str, signal: SignalSource = SignalSource.VECTOR, score: float = 1.0) -> SearchCandidate:
        chunk = _make_chunk(book_id=name, text=f"passage {name}")
        return SearchCandidate(chunk_id=chunk.chunk_id, raw_score=score, source_signal=signal, chunk=chunk)

    return factory


@pytest.fixture
def make_fused() -> Callable[..., list[FusedCandidate]]:
    """Factory for a fused list of ``count`` candidates, best first."""

    def factory(count: int, book_id: str = "book-1") -> list[FusedCandidate]:
        fused = []
        for index in range(count):
            chunk = _make_chunk(book_id=book_id, chunk_index=index, text=f"passage number {index}")
            fused.append(
                FusedCandidate(
                    chunk_id=chunk.chunk_id,
                    fused_score=1.0 / (index + 1),
                    contributing_signals=[SignalSource.VECTOR],
                    vector_rank=index + 1,
                    chunk=chunk,
                )
            )
        return fused

    return factory


@pytest.fixture
def database_url(tmp_path) -> str:
    """SQLite file per test; every session gets its own connection."""
    return f"sqlite+aiosqlite:///{tmp_path / 'bookrag.db'}"


@pytest.fixture
async def test_async_engine(database_url: str):
    """
    Create SQLite async database for testing.

    Yields:
        AsyncEngine: Engine with all tables created
    """
    engine = create_async_engine(database_url)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def repository(test_async_engine: AsyncEngine) -> ConversationRepository:
    """Provide a repository over the test database."""
    return ConversationRepository(get_async_session_factory(test_async_engine))


@pytest.fixture
def test_settings(database_url: str) -> Settings:
    """Offline settings: fake providers, memory vector store, SQLite."""
    return Settings(
        log_level="WARNING",
        vector_store=VectorStoreSettings(
            store_type="memory",
            embedding_provider="fake",
            embedding_model="fake-embedding",
            embedding_dimension=32,
            embedding_backoff_multiplier=0.0,
        ),
        generation=GenerationSettings(provider="fake", model_id="fake-chat"),
        retrieval=RetrievalSettings(rerank_enabled=False),
        cache=CacheSettings(),
        database=DatabaseSettings(url_override=database_url),
    )
