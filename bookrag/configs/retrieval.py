"""
Retrieval configuration settings.

Search budgets, fusion weights and reranking thresholds.

Dependencies: pydantic, pydantic_settings
System role: Hybrid retrieval configuration
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class RetrievalSettings(BaseSettings):
    """Hybrid retrieval, fusion and reranking configuration."""

    model_config = SettingsConfigDict(
        env_prefix="RETRIEVAL_",
        case_sensitive=False,
        extra="ignore",
    )

    keyword_index_type: str = Field(default="bm25", description="Keyword backend name")
    default_top_k: int = Field(default=5, description="Passages returned when the request does not say")
    candidate_pool_size: int = Field(
        default=20,
        description="Candidates requested from each signal before fusion",
    )
    vector_timeout_seconds: float = Field(default=2.0, description="Vector search time budget")
    keyword_timeout_seconds: float = Field(default=2.0, description="Keyword search time budget")
    keyword_weight: float = Field(
        default=0.7,
        description="Damping factor applied to keyword contributions during fusion",
    )
    title_boost: float = Field(default=2.0, description="Weight of title matches relative to content")

    rerank_enabled: bool = Field(default=True, description="Run the reranking pass")
    rerank_max_candidates: int = Field(default=20, description="Shortlist size scored by the reranker")
    rerank_min_candidates: int = Field(
        default=4,
        description="Below this many candidates reranking is skipped",
    )
    rerank_default_score: float = Field(
        default=0.5,
        description="Score assigned when a candidate cannot be scored",
    )
    rerank_max_concurrency: int = Field(default=5, description="Concurrent scoring calls")
