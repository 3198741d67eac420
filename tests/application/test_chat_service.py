"""
Test suite for ChatService.

Tests conversation validation, message persistence order, history in
prompts, the no-context reply and serialized writes for concurrent turns.
Uses the SQLite-backed repository, a mocked retriever and a recording chat
provider.

System role: Verification of chat service orchestration layer
"""

import asyncio
import uuid
from collections.abc import AsyncIterator
from unittest.mock import AsyncMock, MagicMock

import pytest

from bookrag.application.services.chat_service import ChatService, ConversationLocks
from bookrag.boundary.db.repository import ConversationRepository
from bookrag.core.exceptions import ConversationNotFound, InvalidQuery, NoRelevantContext
from bookrag.core.generation import GenerationOrchestrator, PromptBuilder
from bookrag.core.generation.prompt_builder import NO_CONTEXT_MESSAGE
from bookrag.core.resilience import CircuitBreaker
from bookrag.core.retrieval.hybrid import RetrievalResult
from bookrag.models.conversation import MessageRole, MessageStatus, SearchType
from bookrag.models.streaming import StreamEventType


class RecordingProvider:
    """Streams a fixed answer and records the prompts it received."""

    model_name = "recording"

    def __init__(self, answer: str = "Ahab [1]") -> None:
        self.answer = answer
        self.prompts: list[str] = []

    async def astream(self, messages, temperature: float, max_tokens: int) -> AsyncIterator[str]:
        self.prompts.append(messages[-1].content)
        for word in self.answer.split(" "):
            await asyncio.sleep(0)
            yield word + " "

    async def ainvoke(self, messages, temperature: float, max_tokens: int) -> str:
        return self.answer


@pytest.fixture
def mock_retriever(make_fused) -> MagicMock:
    retriever = MagicMock()
    retriever.retrieve = AsyncMock(
        return_value=RetrievalResult(passages=make_fused(2), search_type=SearchType.HYBRID, vector_count=2, keyword_count=2)
    )
    return retriever


@pytest.fixture
def provider() -> RecordingProvider:
    return RecordingProvider()


@pytest.fixture
def chat_service(repository: ConversationRepository, mock_retriever: MagicMock, provider: RecordingProvider) -> ChatService:
    """Provide ChatService wired to the SQLite repository."""
    orchestrator = GenerationOrchestrator(provider, CircuitBreaker("llm"), persistence=repository)
    return ChatService(
        repository=repository,
        retriever=mock_retriever,
        prompt_builder=PromptBuilder(history_turns=6),
        orchestrator=orchestrator,
        locks=ConversationLocks(),
    )


async def _reply(service: ChatService, conversation_id: uuid.UUID, message: str) -> list:
    return [event async for event in service.stream_reply(conversation_id, message)]


class TestChatServiceConversations:
    """Test suite for conversation management."""

    @pytest.mark.asyncio
    async def test_create_conversation_should_scope_to_book(self, chat_service: ChatService) -> None:
        conversation = await chat_service.create_conversation(user_id="u1", book_id="moby")

        assert conversation.book_id == "moby"

    @pytest.mark.asyncio
    async def test_get_messages_should_raise_for_unknown_conversation(self, chat_service: ChatService) -> None:
        with pytest.raises(ConversationNotFound):
            await chat_service.get_messages(uuid.uuid4())

    @pytest.mark.asyncio
    async def test_get_active_conversation_should_reject_archived(self, chat_service: ChatService) -> None:
        # Arrange
        conversation = await chat_service.create_conversation(user_id="u1")
        await chat_service.archive_conversation(conversation.id)

        # Act & Assert
        with pytest.raises(ConversationNotFound):
            await chat_service.get_active_conversation(conversation.id)


class TestChatServiceStreamReply:
    """Test suite for ChatService.stream_reply."""

    @pytest.mark.asyncio
    async def test_stream_reply_should_stream_and_persist_both_messages(
        self, chat_service: ChatService, repository: ConversationRepository
    ) -> None:
        # Arrange
        conversation = await chat_service.create_conversation(user_id="u1", book_id="moby")

        # Act
        events = await _reply(chat_service, conversation.id, "Who is the captain?")

        # Assert
        assert events[-1].type is StreamEventType.DONE
        assert all(event.type is StreamEventType.CONTENT for event in events[:-1])
        messages = await chat_service.get_messages(conversation.id)
        assert [message.role for message in messages] == [MessageRole.USER, MessageRole.ASSISTANT]
        assert messages[1].content == "Ahab [1] "
        assert messages[1].status is MessageStatus.COMPLETED
        assert len(messages[1].sources) == 2
        loaded = await repository.get_conversation(conversation.id)
        assert loaded.message_count == 2
        assert loaded.total_tokens_used > 0

    @pytest.mark.asyncio
    async def test_stream_reply_should_scope_retrieval_to_conversation_book(
        self, chat_service: ChatService, mock_retriever: MagicMock
    ) -> None:
        conversation = await chat_service.create_conversation(user_id="u1", book_id="moby")

        await _reply(chat_service, conversation.id, "Who?")

        query, context = mock_retriever.retrieve.await_args.args
        assert query == "Who?"
        assert context.book_id == "moby"

    @pytest.mark.asyncio
    async def test_second_turn_should_include_history(
        self, chat_service: ChatService, provider: RecordingProvider
    ) -> None:
        # Arrange
        conversation = await chat_service.create_conversation(user_id="u1")
        await _reply(chat_service, conversation.id, "Who is the captain?")

        # Act
        await _reply(chat_service, conversation.id, "What does he hunt?")

        # Assert
        assert "Previous Conversation:" not in provider.prompts[0]
        assert "User: Who is the captain?" in provider.prompts[1]
        assert "Assistant: Ahab [1]" in provider.prompts[1]
        assert "User: What does he hunt?" not in provider.prompts[1].split("Passages:")[0]

    @pytest.mark.asyncio
    async def test_stream_reply_should_reject_blank_message(self, chat_service: ChatService) -> None:
        conversation = await chat_service.create_conversation(user_id="u1")

        with pytest.raises(InvalidQuery):
            await _reply(chat_service, conversation.id, "   ")

    @pytest.mark.asyncio
    async def test_stream_reply_should_reject_archived_conversation(self, chat_service: ChatService) -> None:
        conversation = await chat_service.create_conversation(user_id="u1")
        await chat_service.archive_conversation(conversation.id)

        with pytest.raises(ConversationNotFound):
            await _reply(chat_service, conversation.id, "Hello?")

    @pytest.mark.asyncio
    async def test_no_context_should_reply_honestly_without_model(
        self, chat_service: ChatService, mock_retriever: MagicMock, provider: RecordingProvider
    ) -> None:
        # Arrange
        mock_retriever.retrieve.side_effect = NoRelevantContext("nothing")
        conversation = await chat_service.create_conversation(user_id="u1")

        # Act
        events = await _reply(chat_service, conversation.id, "Zeppelins?")

        # Assert
        assert [event.type for event in events] == [StreamEventType.CONTENT, StreamEventType.DONE]
        assert events[0].data["text"] == NO_CONTEXT_MESSAGE
        assert events[1].data["sources"] == []
        assert provider.prompts == []
        messages = await chat_service.get_messages(conversation.id)
        assert messages[-1].content == NO_CONTEXT_MESSAGE
        assert messages[-1].confidence == 0.0

    @pytest.mark.asyncio
    async def test_concurrent_turns_should_keep_messages_consistent(
        self, chat_service: ChatService, repository: ConversationRepository
    ) -> None:
        # Arrange
        conversation = await chat_service.create_conversation(user_id="u1")

        # Act
        await asyncio.gather(
            _reply(chat_service, conversation.id, "first"),
            _reply(chat_service, conversation.id, "second"),
        )

        # Assert
        messages = await chat_service.get_messages(conversation.id)
        assert len(messages) == 4
        assert sorted(m.content for m in messages if m.role is MessageRole.USER) == ["first", "second"]
        assert (await repository.get_conversation(conversation.id)).message_count == 4


class TestConversationLocks:
    """Test suite for ConversationLocks."""

    def test_same_conversation_should_share_lock(self) -> None:
        locks = ConversationLocks()
        conversation_id = uuid.uuid4()

        first = locks.get(conversation_id)

        assert locks.get(conversation_id) is first
        assert locks.get(uuid.uuid4()) is not first
