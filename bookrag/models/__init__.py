"""
Domain models and API schemas.

Pydantic value objects shared by core, boundary and application layers.
"""

from bookrag.models.chunk import BookRecord, Chunk, PageRecord
from bookrag.models.conversation import (
    Conversation,
    ConversationStatus,
    ConversationType,
    Message,
    MessageRole,
    MessageStatus,
    SearchLogEntry,
    SearchType,
)
from bookrag.models.search import (
    FusedCandidate,
    SearchCandidate,
    SearchContext,
    SignalSource,
    SourceReference,
)
from bookrag.models.streaming import StreamEvent, StreamEventType

__all__ = [
    "BookRecord",
    "Chunk",
    "PageRecord",
    "Conversation",
    "ConversationStatus",
    "ConversationType",
    "Message",
    "MessageRole",
    "MessageStatus",
    "SearchLogEntry",
    "SearchType",
    "FusedCandidate",
    "SearchCandidate",
    "SearchContext",
    "SignalSource",
    "SourceReference",
    "StreamEvent",
    "StreamEventType",
]
