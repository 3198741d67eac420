"""
Streaming event schemas.

Typed events delivered to the caller for one generation: any number of
content events followed by exactly one terminal done or error event.

Dependencies: pydantic
System role: Streaming protocol schemas
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel

from bookrag.models.search import SourceReference


class StreamEventType(str, Enum):
    """Server-to-client event types."""

    CONTENT = "content"
    DONE = "done"
    ERROR = "error"

    @property
    def is_terminal(self) -> bool:
        return self is not StreamEventType.CONTENT


class ClientEventType(str, Enum):
    """Client-to-server event types."""

    CHAT = "chat"
    PING = "ping"


class StreamEvent(BaseModel):
    """
    Streaming event model.

    Attributes:
        type: Event type identifier
        data: Event-specific payload
    """

    type: StreamEventType
    data: dict[str, Any]

    @classmethod
    def content(cls, text: str) -> "StreamEvent":
        return cls(type=StreamEventType.CONTENT, data={"text": text})

    @classmethod
    def done(cls, sources: list[SourceReference], tokens_used: int) -> "StreamEvent":
        return cls(
            type=StreamEventType.DONE,
            data={
                "sources": [source.model_dump() for source in sources],
                "tokens_used": tokens_used,
            },
        )

    @classmethod
    def error(cls, message: str) -> "StreamEvent":
        return cls(type=StreamEventType.ERROR, data={"message": message})

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dictionary."""
        return {"type": self.type.value, **self.data}
