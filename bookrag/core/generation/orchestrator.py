"""
Generation orchestrator.

Streams one grounded answer. A producer task reads the provider stream and
forwards text through an asyncio.Queue to the single consumer, so events
arrive in provider order. The run moves through

    BUILDING_CONTEXT -> AWAITING_FIRST_TOKEN -> STREAMING -> COMPLETED | ERRORED

and ends with exactly one terminal event (done or error). If the consumer
stops iterating, forwarding stops but the producer keeps running until the
provider finishes or the server-side timeout fires, then persists the
assistant message either way.

Dependencies: asyncio, bookrag.core.resilience, bookrag.boundary.llm
System role: Streaming answer generation
"""

import asyncio
import logging
import time
from collections.abc import AsyncIterator
from enum import Enum
from typing import Protocol
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from bookrag.boundary.llm.chat_provider import ChatProvider
from bookrag.core.exceptions import GenerationProviderUnavailable
from bookrag.core.generation.prompt_builder import BuiltPrompt
from bookrag.core.resilience import GENERATION_FALLBACK_MESSAGE, CircuitBreaker
from bookrag.core.text import count_tokens
from bookrag.models.conversation import Message, MessageRole, MessageStatus
from bookrag.models.streaming import StreamEvent
from bookrag.observability.log_utils import log_exception_with_context

logger = logging.getLogger(__name__)

GENERATION_ERROR_MESSAGE = "Answer generation failed. Please try again."


class GenerationState(str, Enum):
    """Lifecycle of one generation run."""

    BUILDING_CONTEXT = "building_context"
    AWAITING_FIRST_TOKEN = "awaiting_first_token"
    STREAMING = "streaming"
    COMPLETED = "completed"
    ERRORED = "errored"


class MessageStore(Protocol):
    """Persistence used to record the assistant message."""

    async def save_message(self, conversation_id: UUID, message: Message) -> None: ...

    async def append_conversation(self, conversation_id: UUID, tokens_used: int, message_delta: int) -> None: ...


class GenerationRequest(BaseModel):
    """
    One answer to generate.

    Attributes:
        prompt: Built prompt (messages, passages, sampling parameters)
        conversation_id: Conversation to persist into; None skips persistence
        confidence: Retrieval confidence recorded on the message
        write_lock: Lock serializing writes to the conversation
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    prompt: BuiltPrompt
    conversation_id: UUID | None = None
    confidence: float | None = None
    write_lock: asyncio.Lock | None = None


class GenerationRun:
    """Mutable record of one run: state, collected text, terminal outcome."""

    def __init__(self, request: GenerationRequest) -> None:
        self.request = request
        self.state = GenerationState.BUILDING_CONTEXT
        self.parts: list[str] = []
        self.forwarding = True
        self.error: str | None = None
        self.started_at = time.monotonic()

    def transition(self, state: GenerationState) -> None:
        logger.info(
            f"{__name__}:transition - {self.state.value} -> {state.value}",
            extra={"conversation_id": str(self.request.conversation_id)},
        )
        self.state = state

    @property
    def content(self) -> str:
        return "".join(self.parts)

    @property
    def latency_ms(self) -> int:
        return int((time.monotonic() - self.started_at) * 1000)


class GenerationOrchestrator:
    """Runs streamed generations behind the language-model circuit breaker."""

    def __init__(
        self,
        provider: ChatProvider,
        breaker: CircuitBreaker,
        persistence: MessageStore | None = None,
        generation_timeout: float = 60.0,
    ) -> None:
        """
        Initialize orchestrator.

        Args:
            provider: Streaming chat provider
            breaker: Circuit breaker guarding the provider
            persistence: Where assistant messages are recorded
            generation_timeout: Server-side limit for one run in seconds
        """
        self._provider = provider
        self._breaker = breaker
        self._persistence = persistence
        self._timeout = generation_timeout
        self._producers: set[asyncio.Task] = set()

    async def stream(self, request: GenerationRequest) -> AsyncIterator[StreamEvent]:
        """
        Stream the answer for a request.

        Yields:
            StreamEvent: content events, then exactly one done or error event
        """
        run = GenerationRun(request)
        logger.info(
            f"{__name__}:stream - Context ready",
            extra={
                "passages": len(request.prompt.passages),
                "prompt_tokens": request.prompt.prompt_tokens,
            },
        )

        if not self._breaker.allow_request():
            logger.warning(f"{__name__}:stream - LLM breaker open, returning fallback message")
            run.error = GENERATION_FALLBACK_MESSAGE
            run.transition(GenerationState.ERRORED)
            await self._persist(run, MessageStatus.ERROR, content=GENERATION_FALLBACK_MESSAGE)
            yield StreamEvent.error(GENERATION_FALLBACK_MESSAGE)
            return

        queue: asyncio.Queue[StreamEvent] = asyncio.Queue()
        producer = asyncio.create_task(self._produce(run, queue))
        self._producers.add(producer)
        producer.add_done_callback(self._producers.discard)

        try:
            while True:
                event = await queue.get()
                yield event
                if event.type.is_terminal:
                    break
            await producer
        finally:
            # Consumer gone: stop forwarding, let the producer finish on its own.
            run.forwarding = False

    async def _produce(self, run: GenerationRun, queue: asyncio.Queue) -> None:
        try:
            await asyncio.wait_for(self._read_provider(run, queue), timeout=self._timeout)
        except Exception as e:
            self._breaker.record_failure()
            error = GenerationProviderUnavailable(
                GENERATION_ERROR_MESSAGE,
                details={"error_type": type(e).__name__, "partial_tokens": count_tokens(run.content)},
            )
            log_exception_with_context(
                logger,
                f"{__name__}:_produce - Generation failed in state {run.state.value}",
                e,
                conversation_id=run.request.conversation_id,
            )
            run.error = error.message
            run.transition(GenerationState.ERRORED)
            queue.put_nowait(StreamEvent.error(error.message))
            await self._persist(run, MessageStatus.ERROR)
            return
        except asyncio.CancelledError:
            self._breaker.release_trial()
            raise

        self._breaker.record_success()
        run.transition(GenerationState.COMPLETED)
        queue.put_nowait(StreamEvent.done(run.request.prompt.sources, self._tokens_used(run)))
        await self._persist(run, MessageStatus.COMPLETED)

    async def _read_provider(self, run: GenerationRun, queue: asyncio.Queue) -> None:
        prompt = run.request.prompt
        run.transition(GenerationState.AWAITING_FIRST_TOKEN)
        async for text in self._provider.astream(
            prompt.messages,
            temperature=prompt.temperature,
            max_tokens=prompt.max_tokens,
        ):
            if run.state is GenerationState.AWAITING_FIRST_TOKEN:
                run.transition(GenerationState.STREAMING)
            run.parts.append(text)
            if run.forwarding:
                queue.put_nowait(StreamEvent.content(text))

    def _tokens_used(self, run: GenerationRun) -> int:
        return run.request.prompt.prompt_tokens + count_tokens(run.content)

    async def _persist(self, run: GenerationRun, status: MessageStatus, content: str | None = None) -> None:
        request = run.request
        if self._persistence is None or request.conversation_id is None:
            return

        completed = status is MessageStatus.COMPLETED
        message = Message(
            role=MessageRole.ASSISTANT,
            content=run.content if content is None else content,
            sources=request.prompt.sources if completed else [],
            tokens_used=self._tokens_used(run) if run.parts else 0,
            latency_ms=run.latency_ms,
            model_name=self._provider.model_name,
            confidence=request.confidence if completed else 0.0,
            status=status,
        )

        try:
            if request.write_lock is not None:
                async with request.write_lock:
                    await self._write(request.conversation_id, message)
            else:
                await self._write(request.conversation_id, message)
        except Exception as e:
            log_exception_with_context(
                logger,
                f"{__name__}:_persist - Failed to persist assistant message",
                e,
                conversation_id=request.conversation_id,
                status=status.value,
            )

    async def _write(self, conversation_id: UUID, message: Message) -> None:
        await self._persistence.save_message(conversation_id, message)
        await self._persistence.append_conversation(conversation_id, message.tokens_used, 1)

    async def wait_idle(self) -> None:
        """Wait for producers whose consumers went away (used on shutdown and in tests)."""
        if self._producers:
            await asyncio.gather(*list(self._producers), return_exceptions=True)
