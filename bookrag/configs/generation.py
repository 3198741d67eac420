"""
Generation configuration settings.

Language model provider selection, sampling parameters per task and
prompt budgets.

Dependencies: pydantic, pydantic_settings
System role: Answer generation configuration
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class GenerationSettings(BaseSettings):
    """Language model and prompt configuration."""

    model_config = SettingsConfigDict(
        env_prefix="GENERATION_",
        case_sensitive=False,
        extra="ignore",
    )

    provider: str = Field(default="google", description="Chat model provider name")
    model_id: str = Field(default="gemini-2.5-flash", description="Chat model identifier")
    rerank_model_id: str | None = Field(
        default=None,
        description="Model used for relevance scoring (defaults to model_id)",
    )

    search_temperature: float = Field(default=0.1, description="Temperature for factual search answers")
    search_max_tokens: int = Field(default=512, description="Max answer tokens for search")
    chat_temperature: float = Field(default=0.7, description="Temperature for conversational answers")
    chat_max_tokens: int = Field(default=1024, description="Max answer tokens for chat")

    context_token_budget: int = Field(
        default=2000,
        description="Maximum tokens of retrieved passages placed in a prompt",
    )
    history_turns: int = Field(default=6, description="Prior conversation messages included in chat prompts")
    generation_timeout_seconds: float = Field(
        default=60.0,
        description="Server-side limit for one streamed generation",
    )
