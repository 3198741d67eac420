"""
Conversation repository.

The narrow persistence interface used by the services: conversations,
their messages, and search logs. Each call runs in its own session and
transaction.

Dependencies: sqlalchemy, bookrag.boundary.db
System role: Relational persistence for chat and search usage
"""

import logging
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from bookrag.boundary.db.CRUD.base_crud import BaseCRUD
from bookrag.boundary.db.models import ConversationModel, MessageModel, SearchLogModel
from bookrag.core.exceptions import ConversationNotFound
from bookrag.models.conversation import (
    Conversation,
    ConversationStatus,
    ConversationType,
    Message,
    MessageRole,
    MessageStatus,
    SearchLogEntry,
)
from bookrag.models.search import SourceReference

logger = logging.getLogger(__name__)


def _to_conversation(row: ConversationModel) -> Conversation:
    return Conversation(
        id=row.id,
        user_id=row.user_id,
        book_id=row.book_id,
        title=row.title,
        conversation_type=ConversationType(row.conversation_type),
        status=ConversationStatus(row.status),
        total_tokens_used=row.total_tokens_used,
        message_count=row.message_count,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _to_message(row: MessageModel) -> Message:
    return Message(
        role=MessageRole(row.role),
        content=row.content,
        sources=[SourceReference(**source) for source in row.sources or []],
        tokens_used=row.tokens_used,
        latency_ms=row.latency_ms,
        model_name=row.model_name,
        confidence=row.confidence,
        status=MessageStatus(row.status),
        created_at=row.created_at,
    )


class ConversationRepository:
    """SQLAlchemy-backed persistence for conversations and search logs."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory
        self._conversations = BaseCRUD(ConversationModel)
        self._messages = BaseCRUD(MessageModel)
        self._search_logs = BaseCRUD(SearchLogModel)

    async def create_conversation(
        self,
        user_id: str,
        book_id: str | None = None,
        title: str | None = None,
        conversation_type: ConversationType | None = None,
    ) -> Conversation:
        """
        Open a new conversation.

        The type defaults to book_specific when a book is given, general
        otherwise.
        """
        if conversation_type is None:
            conversation_type = ConversationType.BOOK_SPECIFIC if book_id else ConversationType.GENERAL

        async with self._session_factory() as session:
            row = await self._conversations.create(
                session,
                user_id=user_id,
                book_id=book_id,
                title=title,
                conversation_type=conversation_type.value,
                status=ConversationStatus.ACTIVE.value,
            )
            await session.commit()

        logger.info(f"{__name__}:create_conversation - Created conversation", extra={"conversation_id": str(row.id)})
        return _to_conversation(row)

    async def get_conversation(self, conversation_id: UUID) -> Conversation | None:
        async with self._session_factory() as session:
            row = await self._conversations.get_by_id(session, conversation_id)
            return _to_conversation(row) if row else None

    async def get_recent_messages(self, conversation_id: UUID, limit: int | None = None) -> list[Message]:
        """
        Messages of a conversation in chronological order.

        Args:
            conversation_id: Conversation UUID
            limit: Keep only the last ``limit`` messages (None for all)
        """
        async with self._session_factory() as session:
            rows = await self._messages.list_where(
                session,
                MessageModel.conversation_id == conversation_id,
                order_by=MessageModel.position.desc(),
                limit=limit,
            )
        return [_to_message(row) for row in reversed(rows)]

    async def save_message(self, conversation_id: UUID, message: Message) -> None:
        """Append a message at the end of the conversation."""
        async with self._session_factory() as session:
            count = await session.scalar(
                select(func.count()).select_from(MessageModel).where(MessageModel.conversation_id == conversation_id)
            )
            await self._messages.create(
                session,
                conversation_id=conversation_id,
                position=count or 0,
                role=message.role.value,
                content=message.content,
                sources=[source.model_dump() for source in message.sources],
                tokens_used=message.tokens_used,
                latency_ms=message.latency_ms,
                model_name=message.model_name,
                confidence=message.confidence,
                status=message.status.value,
            )
            await session.commit()

    async def append_conversation(self, conversation_id: UUID, tokens_used: int, message_delta: int) -> None:
        """Add to the conversation's token and message counters."""
        async with self._session_factory() as session:
            updated = await self._conversations.update_by_id(
                session,
                conversation_id,
                total_tokens_used=ConversationModel.total_tokens_used + tokens_used,
                message_count=ConversationModel.message_count + message_delta,
            )
            await session.commit()
        if not updated:
            raise ConversationNotFound(str(conversation_id))

    async def archive_conversation(self, conversation_id: UUID) -> Conversation:
        """
        Soft-delete a conversation.

        Raises:
            ConversationNotFound: If the conversation does not exist
        """
        async with self._session_factory() as session:
            updated = await self._conversations.update_by_id(
                session,
                conversation_id,
                status=ConversationStatus.ARCHIVED.value,
            )
            if not updated:
                raise ConversationNotFound(str(conversation_id))
            await session.commit()
            row = await self._conversations.get_by_id(session, conversation_id)

        logger.info(f"{__name__}:archive_conversation - Archived", extra={"conversation_id": str(conversation_id)})
        return _to_conversation(row)

    async def log_search(self, entry: SearchLogEntry) -> None:
        async with self._session_factory() as session:
            await self._search_logs.create(
                session,
                query=entry.query,
                search_type=entry.search_type.value,
                results_count=entry.results_count,
                response_time_ms=entry.response_time_ms,
                filters_applied=entry.filters_applied,
                user_id=entry.user_id,
            )
            await session.commit()

    async def count_search_logs(self) -> int:
        async with self._session_factory() as session:
            return await session.scalar(select(func.count()).select_from(SearchLogModel)) or 0
