"""
Chat model provider.

Adapts LangChain chat models to the two calls the generation layer needs:
a token stream and a single completion, each with per-call temperature and
output limit. Providers are selected by name from ``LLM_PROVIDERS``
(GENERATION_PROVIDER).

Dependencies: langchain_core, langchain_google_genai
System role: Language model provider adapter
"""

import logging
import threading
from collections.abc import AsyncIterator, Callable
from typing import Any, Protocol

from langchain_core.language_models import BaseChatModel
from langchain_core.language_models.fake_chat_models import FakeListChatModel
from langchain_core.messages import BaseMessage
from langchain_google_genai import ChatGoogleGenerativeAI

from bookrag.configs.generation import GenerationSettings

logger = logging.getLogger(__name__)

ChatModelFactory = Callable[[str, float, int], BaseChatModel]

FAKE_RESPONSE = "This is a placeholder answer from the fake chat provider [1]."


class ChatProvider(Protocol):
    """What the generation layer needs from a language model."""

    model_name: str

    def astream(
        self,
        messages: list[BaseMessage],
        temperature: float,
        max_tokens: int,
    ) -> AsyncIterator[str]: ...

    async def ainvoke(
        self,
        messages: list[BaseMessage],
        temperature: float,
        max_tokens: int,
    ) -> str: ...


def content_to_text(content: Any) -> str:
    """
    Flatten message content into plain text.

    Gemini may return content as a list of parts (strings or dicts with a
    "text" key) instead of a single string.
    """
    if isinstance(content, list):
        return "".join(
            item if isinstance(item, str) else (item.get("text", "") if isinstance(item, dict) else str(item))
            for item in content
        )
    return str(content) if content else ""


class LangChainChatProvider:
    """
    ChatProvider backed by a LangChain chat model.

    One model instance is built and kept per (temperature, max_tokens) pair.
    """

    def __init__(self, factory: ChatModelFactory, model_name: str) -> None:
        self.model_name = model_name
        self._factory = factory
        self._models: dict[tuple[float, int], BaseChatModel] = {}
        self._lock = threading.Lock()

    def _model(self, temperature: float, max_tokens: int) -> BaseChatModel:
        key = (temperature, max_tokens)
        with self._lock:
            if key not in self._models:
                self._models[key] = self._factory(self.model_name, temperature, max_tokens)
            return self._models[key]

    async def astream(
        self,
        messages: list[BaseMessage],
        temperature: float,
        max_tokens: int,
    ) -> AsyncIterator[str]:
        """
        Stream text fragments as the model produces them.

        Yields:
            str: Non-empty text fragments in arrival order
        """
        model = self._model(temperature, max_tokens)
        async for chunk in model.astream(messages):
            text = content_to_text(chunk.content)
            if text:
                yield text

    async def ainvoke(
        self,
        messages: list[BaseMessage],
        temperature: float,
        max_tokens: int,
    ) -> str:
        """Return the complete model response as text."""
        model = self._model(temperature, max_tokens)
        response = await model.ainvoke(messages)
        return content_to_text(response.content)


def _google(model_name: str, temperature: float, max_tokens: int) -> BaseChatModel:
    return ChatGoogleGenerativeAI(
        model=model_name,
        temperature=temperature,
        max_output_tokens=max_tokens,
    )


def _fake(model_name: str, temperature: float, max_tokens: int) -> BaseChatModel:
    return FakeListChatModel(responses=[FAKE_RESPONSE])


LLM_PROVIDERS: dict[str, ChatModelFactory] = {
    "google": _google,
    "fake": _fake,
}


def get_chat_provider(settings: GenerationSettings, model_name: str | None = None) -> LangChainChatProvider:
    """
    Build the chat provider named in settings.

    Args:
        settings: Generation settings
        model_name: Override for settings.model_id

    Raises:
        ValueError: If the provider is unknown
    """
    provider = settings.provider.lower()
    factory = LLM_PROVIDERS.get(provider)
    if factory is None:
        raise ValueError(f"Invalid GENERATION_PROVIDER: {provider}. Must be one of {sorted(LLM_PROVIDERS)}.")

    name = model_name or settings.model_id
    logger.info(f"{__name__}:get_chat_provider - Using '{provider}' chat provider", extra={"model": name})
    return LangChainChatProvider(factory, name)
