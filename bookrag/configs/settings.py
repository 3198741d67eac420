"""
Unified application settings.

Aggregates all configuration modules into a single Settings class.
Provides dependency injection factory for FastAPI.

Dependencies: All config modules
System role: Central configuration aggregator for the application
"""

from functools import lru_cache

from pydantic import Field, model_validator

from bookrag.configs.base import BaseSettings
from bookrag.configs.cache import CacheSettings
from bookrag.configs.chunking import ChunkingSettings
from bookrag.configs.database import DatabaseSettings
from bookrag.configs.generation import GenerationSettings
from bookrag.configs.resilience import ResilienceSettings
from bookrag.configs.retrieval import RetrievalSettings
from bookrag.configs.vector_store import VectorStoreSettings


class Settings(BaseSettings):
    """Unified application settings aggregating all config modules."""

    chunking: ChunkingSettings = Field(default_factory=ChunkingSettings)
    retrieval: RetrievalSettings = Field(default_factory=RetrievalSettings)
    vector_store: VectorStoreSettings = Field(default_factory=VectorStoreSettings)
    generation: GenerationSettings = Field(default_factory=GenerationSettings)
    resilience: ResilienceSettings = Field(default_factory=ResilienceSettings)
    cache: CacheSettings = Field(default_factory=CacheSettings)
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)

    @model_validator(mode="after")
    def _reject_fakes_in_production(self) -> "Settings":
        if not self.is_production:
            return self
        fakes = [
            name
            for name, provider in (
                ("vector_store.embedding_provider", self.vector_store.embedding_provider),
                ("generation.provider", self.generation.provider),
            )
            if provider == "fake"
        ]
        if fakes:
            raise ValueError(f"fake providers are not allowed in production: {', '.join(fakes)}")
        return self


@lru_cache
def get_settings() -> Settings:
    """
    Get application settings singleton.

    Environment variables are loaded once; call ``get_settings.cache_clear()``
    in tests that change them.

    Returns:
        Settings: Application settings instance
    """
    return Settings()
