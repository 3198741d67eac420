"""
Chunking configuration settings.

Token window size and overlap used when splitting book pages into chunks.

Dependencies: pydantic, pydantic_settings
System role: Ingestion chunking configuration
"""

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ChunkingSettings(BaseSettings):
    """Chunk window configuration (tokens are whitespace-delimited words)."""

    model_config = SettingsConfigDict(
        env_prefix="CHUNKING_",
        case_sensitive=False,
        extra="ignore",
    )

    chunk_size: int = Field(default=500, ge=1, description="Target chunk length in tokens")
    chunk_overlap: int = Field(default=50, ge=0, description="Overlap between consecutive chunks in tokens")

    @model_validator(mode="after")
    def _check_overlap(self) -> "ChunkingSettings":
        if self.chunk_overlap >= self.chunk_size:
            raise ValueError("chunk_overlap must be smaller than chunk_size")
        return self
