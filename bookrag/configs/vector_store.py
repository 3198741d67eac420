"""
Vector store configuration settings.

Selects the vector backend and the embedding provider used to feed it.

Dependencies: pydantic, pydantic_settings
System role: Vector database configuration for RAG retrieval
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class VectorStoreSettings(BaseSettings):
    """Vector store and embedding provider configuration."""

    model_config = SettingsConfigDict(
        env_prefix="VECTOR_STORE_",
        case_sensitive=False,
        extra="ignore",
    )

    store_type: str = Field(
        default="faiss",
        description="Vector backend name: 'faiss' or 'memory'",
    )
    embedding_provider: str = Field(
        default="google",
        description="Embedding provider name: 'google' or 'fake'",
    )
    embedding_model: str = Field(
        default="models/gemini-embedding-001",
        description="Embedding model ID, also used as the embedding cache version",
    )
    embedding_dimension: int = Field(
        default=768,
        description="Embedding vector dimension",
    )
    embedding_max_attempts: int = Field(
        default=3,
        description="Attempts per embedding call before giving up",
    )
    embedding_backoff_multiplier: float = Field(
        default=1.0,
        description="Exponential backoff multiplier in seconds between embedding retries",
    )
    embedding_max_concurrency: int = Field(
        default=4,
        description="Maximum in-flight embedding calls during ingestion",
    )
