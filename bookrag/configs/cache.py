"""
Cache configuration settings.

TTLs and capacities for the search-result and embedding caches.

Dependencies: pydantic, pydantic_settings
System role: Response/usage cache configuration
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class CacheSettings(BaseSettings):
    """Search and embedding cache configuration."""

    model_config = SettingsConfigDict(
        env_prefix="CACHE_",
        case_sensitive=False,
        extra="ignore",
    )

    search_ttl_seconds: float = Field(default=10 * 60, description="Search result TTL (minutes range)")
    search_max_entries: int = Field(default=1000, description="Search cache capacity")
    embedding_ttl_seconds: float = Field(default=6 * 60 * 60, description="Embedding TTL (hours range)")
    embedding_max_entries: int = Field(default=20000, description="Embedding cache capacity")
