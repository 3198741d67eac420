"""
Shared settings for the bookrag service.

Holds the deployment environment and logging level every other settings
group can rely on. Values come from BOOKRAG_ENVIRONMENT, LOG_LEVEL and
DEBUG (or a .env file); unknown keys are ignored so one .env can serve the
API, the ingestion scripts and the tests.

Dependencies: pydantic, pydantic_settings
System role: Foundation for all configuration classes
"""

import logging
from typing import Literal

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings as PydanticBaseSettings, SettingsConfigDict

Environment = Literal["development", "test", "production"]


class BaseSettings(PydanticBaseSettings):
    """Environment and logging settings shared by the bookrag service."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    environment: Environment = Field(
        default="development",
        validation_alias=AliasChoices("bookrag_environment", "environment"),
        description="Deployment environment; production refuses fake providers",
    )
    debug: bool = Field(default=False, description="Log at DEBUG regardless of log_level")
    log_level: str = Field(default="INFO", description="Root log level name")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"unknown log level: {v}")
        return level

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def effective_log_level(self) -> str:
        """Level handed to configure_logging; debug mode wins."""
        return "DEBUG" if self.debug else self.log_level
