"""
Language model boundary layer.

Chat model providers used for answer generation and relevance scoring.

Dependencies: langchain_core, langchain_google_genai
System role: LLM provider adapters
"""

from bookrag.boundary.llm.chat_provider import (
    LLM_PROVIDERS,
    ChatProvider,
    LangChainChatProvider,
    content_to_text,
    get_chat_provider,
)
from bookrag.boundary.llm.relevance_scorer import LLMRelevanceScorer

__all__ = [
    "LLM_PROVIDERS",
    "ChatProvider",
    "LangChainChatProvider",
    "LLMRelevanceScorer",
    "content_to_text",
    "get_chat_provider",
]
