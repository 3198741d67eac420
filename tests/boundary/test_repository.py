"""
Test suite for ConversationRepository.

Runs against a per-test SQLite database (aiosqlite) with all tables
created, exercising the real SQLAlchemy mappings.

System role: Verification of conversation and search-log persistence
"""

import uuid
from datetime import datetime, timedelta, timezone

import pytest

from bookrag.boundary.db.base import UTCDateTime
from bookrag.boundary.db.repository import ConversationRepository
from bookrag.core.exceptions import ConversationNotFound
from bookrag.models.conversation import (
    ConversationStatus,
    ConversationType,
    Message,
    MessageRole,
    MessageStatus,
    SearchLogEntry,
    SearchType,
)
from bookrag.models.search import SourceReference


class TestConversationRepositoryConversations:
    """Test suite for conversation lifecycle."""

    @pytest.mark.asyncio
    async def test_create_conversation_should_default_type_from_book(self, repository: ConversationRepository) -> None:
        # Act
        scoped = await repository.create_conversation(user_id="u1", book_id="moby", title="Whales")
        general = await repository.create_conversation(user_id="u1")

        # Assert
        assert scoped.conversation_type is ConversationType.BOOK_SPECIFIC
        assert general.conversation_type is ConversationType.GENERAL
        assert scoped.status is ConversationStatus.ACTIVE
        assert scoped.message_count == 0
        assert scoped.total_tokens_used == 0

    @pytest.mark.asyncio
    async def test_get_conversation_should_round_trip(self, repository: ConversationRepository) -> None:
        created = await repository.create_conversation(user_id="u1", book_id="moby", title="Whales")

        loaded = await repository.get_conversation(created.id)

        assert loaded.id == created.id
        assert loaded.book_id == "moby"
        assert loaded.title == "Whales"

    @pytest.mark.asyncio
    async def test_get_conversation_should_return_none_when_missing(self, repository: ConversationRepository) -> None:
        assert await repository.get_conversation(uuid.uuid4()) is None

    @pytest.mark.asyncio
    async def test_append_conversation_should_increment_counters(self, repository: ConversationRepository) -> None:
        # Arrange
        conversation = await repository.create_conversation(user_id="u1")

        # Act
        await repository.append_conversation(conversation.id, tokens_used=10, message_delta=1)
        await repository.append_conversation(conversation.id, tokens_used=5, message_delta=1)

        # Assert
        loaded = await repository.get_conversation(conversation.id)
        assert loaded.total_tokens_used == 15
        assert loaded.message_count == 2

    @pytest.mark.asyncio
    async def test_append_conversation_should_raise_when_missing(self, repository: ConversationRepository) -> None:
        with pytest.raises(ConversationNotFound):
            await repository.append_conversation(uuid.uuid4(), tokens_used=1, message_delta=1)

    @pytest.mark.asyncio
    async def test_archive_conversation_should_soft_delete(self, repository: ConversationRepository) -> None:
        # Arrange
        conversation = await repository.create_conversation(user_id="u1")

        # Act
        archived = await repository.archive_conversation(conversation.id)

        # Assert
        assert archived.status is ConversationStatus.ARCHIVED
        assert (await repository.get_conversation(conversation.id)).status is ConversationStatus.ARCHIVED

    @pytest.mark.asyncio
    async def test_archive_conversation_should_raise_when_missing(self, repository: ConversationRepository) -> None:
        with pytest.raises(ConversationNotFound):
            await repository.archive_conversation(uuid.uuid4())

    @pytest.mark.asyncio
    async def test_loaded_timestamps_should_be_utc_aware(self, repository: ConversationRepository) -> None:
        # Arrange
        conversation = await repository.create_conversation(user_id="u1")
        await repository.append_conversation(conversation.id, tokens_used=3, message_delta=1)

        # Act
        loaded = await repository.get_conversation(conversation.id)

        # Assert
        assert loaded.created_at.tzinfo is not None
        assert loaded.created_at.utcoffset() == timedelta(0)
        assert loaded.updated_at >= loaded.created_at


class TestUTCDateTime:
    """Test suite for the UTCDateTime column type."""

    def test_bind_should_convert_offsets_to_utc(self) -> None:
        paris = timezone(timedelta(hours=2))

        stored = UTCDateTime().process_bind_param(datetime(2024, 5, 1, 12, 0, tzinfo=paris), None)

        assert stored == datetime(2024, 5, 1, 10, 0, tzinfo=timezone.utc)
        assert stored.tzinfo is timezone.utc

    def test_result_should_mark_naive_values_as_utc(self) -> None:
        loaded = UTCDateTime().process_result_value(datetime(2024, 5, 1, 10, 0), None)

        assert loaded.tzinfo is timezone.utc
        assert UTCDateTime().process_result_value(None, None) is None


class TestConversationRepositoryMessages:
    """Test suite for message persistence."""

    @pytest.mark.asyncio
    async def test_messages_should_be_returned_in_chronological_order(
        self, repository: ConversationRepository
    ) -> None:
        # Arrange
        conversation = await repository.create_conversation(user_id="u1")
        for index in range(5):
            role = MessageRole.USER if index % 2 == 0 else MessageRole.ASSISTANT
            await repository.save_message(conversation.id, Message(role=role, content=f"m{index}"))

        # Act
        everything = await repository.get_recent_messages(conversation.id)
        recent = await repository.get_recent_messages(conversation.id, limit=2)

        # Assert
        assert [message.content for message in everything] == ["m0", "m1", "m2", "m3", "m4"]
        assert [message.content for message in recent] == ["m3", "m4"]

    @pytest.mark.asyncio
    async def test_save_message_should_keep_sources_and_status(self, repository: ConversationRepository) -> None:
        # Arrange
        conversation = await repository.create_conversation(user_id="u1", book_id="moby")
        source = SourceReference(chunk_id="moby:1:0", book_id="moby", page_number=1, book_title="Moby Dick")
        message = Message(
            role=MessageRole.ASSISTANT,
            content="Ahab [1]",
            sources=[source],
            tokens_used=42,
            latency_ms=120,
            model_name="fake-chat",
            confidence=0.75,
            status=MessageStatus.ERROR,
        )

        # Act
        await repository.save_message(conversation.id, message)
        [loaded] = await repository.get_recent_messages(conversation.id)

        # Assert
        assert loaded.sources == [source]
        assert loaded.status is MessageStatus.ERROR
        assert loaded.tokens_used == 42
        assert loaded.confidence == 0.75
        assert loaded.model_name == "fake-chat"

    @pytest.mark.asyncio
    async def test_messages_should_be_scoped_to_conversation(self, repository: ConversationRepository) -> None:
        first = await repository.create_conversation(user_id="u1")
        second = await repository.create_conversation(user_id="u2")
        await repository.save_message(first.id, Message(role=MessageRole.USER, content="hello"))

        assert await repository.get_recent_messages(second.id) == []


class TestConversationRepositorySearchLogs:
    """Test suite for search usage logs."""

    @pytest.mark.asyncio
    async def test_log_search_should_store_entry(self, repository: ConversationRepository) -> None:
        # Arrange
        entry = SearchLogEntry(
            query="white whale",
            search_type=SearchType.HYBRID,
            results_count=3,
            response_time_ms=15,
            filters_applied={"book_id": "moby"},
            user_id="u1",
        )

        # Act
        await repository.log_search(entry)
        await repository.log_search(entry)

        # Assert
        assert await repository.count_search_logs() == 2
