"""
Resilience configuration settings.

Circuit breaker thresholds for the language model and the vector store.

Dependencies: pydantic, pydantic_settings
System role: Failure isolation configuration
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ResilienceSettings(BaseSettings):
    """Circuit breaker configuration shared by wrapped dependencies."""

    model_config = SettingsConfigDict(
        env_prefix="RESILIENCE_",
        case_sensitive=False,
        extra="ignore",
    )

    failure_threshold: int = Field(default=5, description="Failures within the window that open the breaker")
    window_seconds: float = Field(default=60.0, description="Rolling window for counting failures")
    cooldown_seconds: float = Field(default=30.0, description="Time the breaker stays open before a trial call")
