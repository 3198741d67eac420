"""
API request/response schemas.

Contracts consumed by the HTTP layer for search, conversations and
ingestion.

Dependencies: pydantic
System role: API contracts
"""

from uuid import UUID

from pydantic import BaseModel, Field

from bookrag.models.conversation import (
    ConversationStatus,
    ConversationType,
    MessageRole,
    MessageStatus,
    SearchType,
)
from bookrag.models.search import SourceReference


class SearchFilters(BaseModel):
    """Optional search filters."""

    book_id: str | None = Field(default=None, description="Restrict to one book")
    category: str | None = Field(default=None, description="Restrict to one category")


class SearchRequest(BaseModel):
    """Request schema for the non-streaming search endpoint."""

    query: str = Field(description="Natural-language question")
    top_k: int = Field(default=5, ge=1, le=50, description="Passages used to ground the answer")
    filters: SearchFilters = Field(default_factory=SearchFilters)
    user_id: str | None = Field(default=None, description="Caller, for usage logging")


class SearchResponse(BaseModel):
    """Response schema for the non-streaming search endpoint."""

    answer: str
    sources: list[SourceReference] = Field(default_factory=list)
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    degraded: bool = Field(default=False, description="True when a fallback path produced the answer")
    search_type: SearchType = SearchType.HYBRID


class ChatRequest(BaseModel):
    """Client chat message payload."""

    message: str = Field(description="User question or message")


class CreateConversationRequest(BaseModel):
    """Request schema for opening a conversation."""

    user_id: str
    book_id: str | None = None
    title: str | None = None


class ConversationResponse(BaseModel):
    """Conversation header returned by the API."""

    id: UUID
    user_id: str
    book_id: str | None = None
    title: str | None = None
    conversation_type: ConversationType
    status: ConversationStatus
    total_tokens_used: int
    message_count: int


class MessageResponse(BaseModel):
    """Single message in a conversation history."""

    role: MessageRole
    content: str
    status: MessageStatus
    sources: list[SourceReference] = Field(default_factory=list)
    tokens_used: int = 0


class MessageHistoryResponse(BaseModel):
    """Response schema for conversation history."""

    messages: list[MessageResponse]
    total: int = Field(description="Total number of messages returned")


class IngestionResponse(BaseModel):
    """Result of ingesting one book."""

    book_id: str
    chunk_count: int
    pages_processed: int
    skipped_pages: list[int] = Field(default_factory=list)
