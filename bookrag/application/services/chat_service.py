"""
Chat service for conversational Q&A over books.

Orchestrates one chat turn: validate the conversation, record the user
message, retrieve passages scoped to the conversation's book, build a chat
prompt with recent history and stream the answer. Writes to one
conversation are serialized by a per-conversation asyncio.Lock.

Dependencies: bookrag.core, bookrag.boundary.db
System role: Chat service orchestration layer
"""

import asyncio
import logging
import weakref
from collections.abc import AsyncIterator
from contextlib import aclosing
from uuid import UUID

from bookrag.boundary.db.repository import ConversationRepository
from bookrag.core.exceptions import ConversationNotFound, InvalidQuery, NoRelevantContext
from bookrag.core.generation.orchestrator import GenerationOrchestrator, GenerationRequest
from bookrag.core.generation.prompt_builder import NO_CONTEXT_MESSAGE, GenerationTask, PromptBuilder
from bookrag.core.retrieval.hybrid import HybridRetriever, confidence_score
from bookrag.core.text import count_tokens, normalize_text
from bookrag.models.conversation import (
    Conversation,
    ConversationStatus,
    Message,
    MessageRole,
    MessageStatus,
)
from bookrag.models.search import SearchContext
from bookrag.models.streaming import StreamEvent

logger = logging.getLogger(__name__)


class ConversationLocks:
    """One asyncio.Lock per conversation id, dropped once nobody holds a reference."""

    def __init__(self) -> None:
        self._locks: weakref.WeakValueDictionary[UUID, asyncio.Lock] = weakref.WeakValueDictionary()

    def get(self, conversation_id: UUID) -> asyncio.Lock:
        lock = self._locks.get(conversation_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[conversation_id] = lock
        return lock


class ChatService:
    """
    Chat service for multi-turn conversations.

    Coordinates conversation validation, history retrieval, hybrid
    retrieval and streamed generation.
    """

    def __init__(
        self,
        repository: ConversationRepository,
        retriever: HybridRetriever,
        prompt_builder: PromptBuilder,
        orchestrator: GenerationOrchestrator,
        locks: ConversationLocks | None = None,
        top_k: int = 5,
        keyword_weight: float = 0.7,
    ) -> None:
        self._repository = repository
        self._retriever = retriever
        self._prompt_builder = prompt_builder
        self._orchestrator = orchestrator
        self._locks = locks or ConversationLocks()
        self._top_k = top_k
        self._keyword_weight = keyword_weight

    async def create_conversation(
        self,
        user_id: str,
        book_id: str | None = None,
        title: str | None = None,
    ) -> Conversation:
        return await self._repository.create_conversation(user_id=user_id, book_id=book_id, title=title)

    async def get_active_conversation(self, conversation_id: UUID) -> Conversation:
        """
        Load a conversation that can still receive messages.

        Raises:
            ConversationNotFound: If missing or archived
        """
        conversation = await self._repository.get_conversation(conversation_id)
        if conversation is None or conversation.status is ConversationStatus.ARCHIVED:
            raise ConversationNotFound(str(conversation_id))
        return conversation

    async def get_messages(self, conversation_id: UUID) -> list[Message]:
        if await self._repository.get_conversation(conversation_id) is None:
            raise ConversationNotFound(str(conversation_id))
        return await self._repository.get_recent_messages(conversation_id)

    async def archive_conversation(self, conversation_id: UUID) -> Conversation:
        async with self._locks.get(conversation_id):
            return await self._repository.archive_conversation(conversation_id)

    async def stream_reply(self, conversation_id: UUID, message: str) -> AsyncIterator[StreamEvent]:
        """
        Stream the assistant's reply to one user message.

        Args:
            conversation_id: Conversation UUID
            message: User's message

        Yields:
            StreamEvent: content events, then one done or error event

        Raises:
            InvalidQuery: If the message is empty
            ConversationNotFound: If the conversation is missing or archived
        """
        text = normalize_text(message)
        if not text:
            raise InvalidQuery("Message must not be empty", field="message")

        conversation = await self.get_active_conversation(conversation_id)
        lock = self._locks.get(conversation_id)

        logger.info(f"{__name__}:stream_reply - Step 1: Recording user message", extra={"conversation_id": str(conversation_id)})
        async with lock:
            history = await self._repository.get_recent_messages(
                conversation_id, limit=self._prompt_builder.history_turns
            )
            await self._repository.save_message(conversation_id, Message(role=MessageRole.USER, content=text))
            await self._repository.append_conversation(conversation_id, tokens_used=count_tokens(text), message_delta=1)

        logger.info(f"{__name__}:stream_reply - Step 2: Retrieving passages")
        context = SearchContext(top_k=self._top_k, book_id=conversation.book_id)
        try:
            retrieval = await self._retriever.retrieve(text, context)
        except NoRelevantContext:
            logger.info(f"{__name__}:stream_reply - No relevant context, answering without the model")
            async with lock:
                await self._repository.save_message(
                    conversation_id,
                    Message(
                        role=MessageRole.ASSISTANT,
                        content=NO_CONTEXT_MESSAGE,
                        confidence=0.0,
                        status=MessageStatus.COMPLETED,
                    ),
                )
                await self._repository.append_conversation(conversation_id, tokens_used=0, message_delta=1)
            yield StreamEvent.content(NO_CONTEXT_MESSAGE)
            yield StreamEvent.done([], 0)
            return

        logger.info(f"{__name__}:stream_reply - Step 3: Streaming answer ({len(retrieval.passages)} passages)")
        prompt = self._prompt_builder.build(text, retrieval.passages, GenerationTask.CHAT, history=history)
        request = GenerationRequest(
            prompt=prompt,
            conversation_id=conversation_id,
            confidence=confidence_score(prompt.passages, self._keyword_weight),
            write_lock=lock,
        )
        async with aclosing(self._orchestrator.stream(request)) as events:
            async for event in events:
                yield event
