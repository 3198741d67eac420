"""
Prompt builder.

Renders retrieved passages with their provenance, fits them into the
context token budget (lowest-ranked passages are dropped first), adds
recent conversation history for chat, and picks the sampling parameters
for the task.

Dependencies: langchain_core.prompts
System role: Prompt assembly for answer generation
"""

import logging
from enum import Enum

from langchain_core.messages import BaseMessage
from langchain_core.prompts import ChatPromptTemplate
from pydantic import BaseModel, ConfigDict, Field

from bookrag.configs.generation import GenerationSettings
from bookrag.core.text import count_tokens, tokenize
from bookrag.models.conversation import Message, MessageRole, MessageStatus
from bookrag.models.search import FusedCandidate, SourceReference

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """You are a reading assistant for an online library. You answer readers' questions using passages from the books they are reading.

## Instructions
1. Use ONLY the numbered passages provided to answer
2. If the passages do not contain the answer, say so plainly instead of guessing
3. Cite passages inline with their number in square brackets, e.g. [1] or [2][3]
4. Only cite numbers that appear in the passages
5. Be concise and answer the question directly

## Conversation History
If provided, recent conversation history shows what the reader already asked.
Use it to understand follow-up questions; do not repeat earlier answers."""

RAG_PROMPT = ChatPromptTemplate.from_messages([
    ("system", SYSTEM_PROMPT),
    ("human", """{chat_history}

Passages:
{context}

Question: {question}"""),
])


NO_CONTEXT_MESSAGE = (
    "I couldn't find any passages in the library that address this question, "
    "so I don't have grounded information to answer it."
)

class GenerationTask(str, Enum):
    """Kind of answer being generated; selects sampling parameters."""

    SEARCH = "search"
    CHAT = "chat"


class BuiltPrompt(BaseModel):
    """Prompt ready for the language model, with what went into it."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    messages: list[BaseMessage]
    text: str
    passages: list[FusedCandidate] = Field(description="Passages placed in the prompt, in citation order")
    temperature: float
    max_tokens: int
    prompt_tokens: int

    @property
    def sources(self) -> list[SourceReference]:
        return [SourceReference.from_chunk(passage.chunk) for passage in self.passages]


def format_passage(number: int, passage: FusedCandidate, book_titles: dict[str, str] | None = None) -> str:
    """Render one passage as ``[n] source: <title>, page <p>`` followed by its text."""
    chunk = passage.chunk
    title = chunk.book_title or (book_titles or {}).get(chunk.book_id) or chunk.book_id
    return f"[{number}] source: {title}, page {chunk.page_number}\n{chunk.text}"


def format_history(history: list[Message]) -> str:
    lines = [
        f"{'User' if message.role is MessageRole.USER else 'Assistant'}: {message.content}"
        for message in history
        if message.content and message.role is not MessageRole.SYSTEM and message.status is not MessageStatus.ERROR
    ]
    if not lines:
        return ""
    return "Previous Conversation:\n" + "\n".join(lines) + "\n"


class PromptBuilder:
    """Builds generation prompts within a passage token budget."""

    def __init__(
        self,
        context_token_budget: int = 2000,
        history_turns: int = 6,
        search_temperature: float = 0.1,
        search_max_tokens: int = 512,
        chat_temperature: float = 0.7,
        chat_max_tokens: int = 1024,
    ) -> None:
        self.context_token_budget = context_token_budget
        self.history_turns = history_turns
        self._parameters = {
            GenerationTask.SEARCH: (search_temperature, search_max_tokens),
            GenerationTask.CHAT: (chat_temperature, chat_max_tokens),
        }

    @classmethod
    def from_settings(cls, settings: GenerationSettings) -> "PromptBuilder":
        return cls(
            context_token_budget=settings.context_token_budget,
            history_turns=settings.history_turns,
            search_temperature=settings.search_temperature,
            search_max_tokens=settings.search_max_tokens,
            chat_temperature=settings.chat_temperature,
            chat_max_tokens=settings.chat_max_tokens,
        )

    def _fit_passages(
        self,
        passages: list[FusedCandidate],
        book_titles: dict[str, str] | None,
    ) -> tuple[list[FusedCandidate], list[str]]:
        used: list[FusedCandidate] = []
        rendered: list[str] = []
        spent = 0
        for passage in passages:
            block = format_passage(len(used) + 1, passage, book_titles)
            cost = count_tokens(block)
            if spent + cost > self.context_token_budget:
                break
            used.append(passage)
            rendered.append(block)
            spent += cost

        if not used and passages:
            # Top passage alone exceeds the budget: keep a truncated copy of it.
            block = format_passage(1, passages[0], book_titles)
            used.append(passages[0])
            rendered.append(" ".join(tokenize(block)[: self.context_token_budget]))

        return used, rendered

    def build(
        self,
        query: str,
        passages: list[FusedCandidate],
        task: GenerationTask = GenerationTask.SEARCH,
        history: list[Message] | None = None,
        book_titles: dict[str, str] | None = None,
    ) -> BuiltPrompt:
        """
        Build the prompt for one answer.

        Args:
            query: Reader's question
            passages: Retrieved passages, best first
            task: Search or chat
            history: Prior conversation messages, oldest first (chat only)
            book_titles: Fallback titles by book id for passages without one

        Returns:
            BuiltPrompt: Messages, rendered text, used passages and parameters
        """
        used, rendered = self._fit_passages(passages, book_titles)
        if len(used) < len(passages):
            logger.info(
                f"{__name__}:build - Dropped {len(passages) - len(used)} passages over the token budget",
                extra={"budget": self.context_token_budget},
            )

        recent = (history or [])[-self.history_turns:] if task is GenerationTask.CHAT and self.history_turns > 0 else []
        messages = RAG_PROMPT.invoke({
            "chat_history": format_history(recent),
            "context": "\n\n".join(rendered),
            "question": query,
        }).to_messages()

        text = "\n\n".join(str(message.content) for message in messages)
        temperature, max_tokens = self._parameters[task]
        return BuiltPrompt(
            messages=messages,
            text=text,
            passages=used,
            temperature=temperature,
            max_tokens=max_tokens,
            prompt_tokens=count_tokens(text),
        )
