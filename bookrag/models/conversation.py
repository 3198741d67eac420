"""
Conversation domain models.

Conversations own an ordered list of messages; messages keep the owning
conversation id for lookup only.

Dependencies: pydantic
System role: Chat persistence data structures
"""

from datetime import datetime, timezone
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, Field

from bookrag.models.search import SourceReference


class MessageRole(str, Enum):
    """Author of a message."""

    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


class MessageStatus(str, Enum):
    """Lifecycle of a message."""

    PENDING = "pending"
    STREAMING = "streaming"
    COMPLETED = "completed"
    ERROR = "error"


class ConversationStatus(str, Enum):
    """Lifecycle of a conversation (archived is a soft delete)."""

    ACTIVE = "active"
    ARCHIVED = "archived"


class ConversationType(str, Enum):
    """What a conversation is about."""

    GENERAL = "general"
    BOOK_SPECIFIC = "book_specific"
    SEARCH = "search"


class SearchType(str, Enum):
    """Which retrieval signals contributed to a search."""

    HYBRID = "hybrid"
    VECTOR_ONLY = "vector_only"
    KEYWORD_ONLY = "keyword_only"
    NONE = "none"


class Message(BaseModel):
    """One turn of a conversation."""

    role: MessageRole
    content: str
    sources: list[SourceReference] = Field(default_factory=list)
    tokens_used: int = 0
    latency_ms: int | None = None
    model_name: str | None = None
    confidence: float | None = None
    status: MessageStatus = MessageStatus.COMPLETED
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class Conversation(BaseModel):
    """Conversation header without its messages."""

    id: UUID
    user_id: str
    book_id: str | None = None
    title: str | None = None
    conversation_type: ConversationType = ConversationType.GENERAL
    status: ConversationStatus = ConversationStatus.ACTIVE
    total_tokens_used: int = 0
    message_count: int = 0
    created_at: datetime | None = None
    updated_at: datetime | None = None


class SearchLogEntry(BaseModel):
    """Usage record written for every search request."""

    query: str
    search_type: SearchType
    results_count: int
    response_time_ms: int
    filters_applied: dict[str, str] = Field(default_factory=dict)
    user_id: str | None = None
