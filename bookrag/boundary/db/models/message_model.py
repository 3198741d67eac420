"""
Message ORM model.

Messages are append-only; ``position`` orders them within their
conversation.

Dependencies: sqlalchemy, bookrag.boundary.db.base
System role: Conversation message persistence
"""

from uuid import UUID

from sqlalchemy import JSON, Float, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from bookrag.boundary.db.base import Base, TimestampMixin, UUIDMixin


class MessageModel(Base, UUIDMixin, TimestampMixin):
    """
    Message ORM model.

    Attributes:
        conversation_id: Owning conversation
        position: 0-based order within the conversation
        role: user | assistant | system
        content: Message text (partial text for errored generations)
        sources: Cited SourceReference dicts
        tokens_used: Prompt + completion tokens for assistant messages
        latency_ms: Generation latency
        model_name: Model that produced the message
        confidence: Retrieval confidence of the answer
        status: pending | streaming | completed | error
    """

    __tablename__ = "messages"
    __table_args__ = (UniqueConstraint("conversation_id", "position", name="uq_messages_conversation_position"),)

    conversation_id: Mapped[UUID] = mapped_column(
        ForeignKey("conversations.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    role: Mapped[str] = mapped_column(String(16), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False, default="")
    sources: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    tokens_used: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    latency_ms: Mapped[int | None] = mapped_column(Integer, nullable=True)
    model_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    confidence: Mapped[float | None] = mapped_column(Float, nullable=True)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="completed")

    conversation = relationship("ConversationModel", back_populates="messages")
