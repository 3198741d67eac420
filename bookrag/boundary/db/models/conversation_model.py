"""
Conversation ORM model.

One row per conversation; counters are updated as assistant messages are
persisted. Archiving is a soft delete via status.

Dependencies: sqlalchemy, bookrag.boundary.db.base
System role: Conversation persistence
"""

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from bookrag.boundary.db.base import Base, TimestampMixin, UUIDMixin


class ConversationModel(Base, UUIDMixin, TimestampMixin):
    """
    Conversation ORM model.

    Attributes:
        user_id: Owning user (opaque id from the host platform)
        book_id: Book the conversation is about, if any
        title: Display title
        conversation_type: general | book_specific | search
        status: active | archived
        total_tokens_used: Prompt + completion tokens across the conversation
        message_count: Messages persisted so far
        messages: Messages ordered by position (cascade delete)
    """

    __tablename__ = "conversations"

    user_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    book_id: Mapped[str | None] = mapped_column(String(255), nullable=True, index=True)
    title: Mapped[str | None] = mapped_column(String(500), nullable=True)
    conversation_type: Mapped[str] = mapped_column(String(32), nullable=False, default="general")
    status: Mapped[str] = mapped_column(String(32), nullable=False, default="active", index=True)
    total_tokens_used: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    message_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    messages = relationship(
        "MessageModel",
        back_populates="conversation",
        cascade="all, delete-orphan",
        order_by="MessageModel.position",
    )
