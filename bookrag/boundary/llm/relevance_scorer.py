"""
LLM relevance scorer.

Asks a chat model how relevant one passage is to a query. The raw reply is
returned as-is; the reranker parses and validates it.

Dependencies: langchain_core
System role: Scoring backend for the reranker
"""

from langchain_core.prompts import ChatPromptTemplate

from bookrag.boundary.llm.chat_provider import ChatProvider

RELEVANCE_PROMPT = ChatPromptTemplate.from_messages([
    (
        "system",
        "You rate how useful a passage from a book is for answering a reader's question. "
        "Reply with a single number between 0 and 1, where 0 means irrelevant and 1 means "
        "the passage directly answers the question. Reply with the number only.",
    ),
    ("human", "Question: {query}\n\nPassage:\n{passage}\n\nRelevance score:"),
])


class LLMRelevanceScorer:
    """RelevanceScorer that delegates to a chat provider at temperature 0."""

    def __init__(self, provider: ChatProvider, max_tokens: int = 8) -> None:
        self._provider = provider
        self._max_tokens = max_tokens

    async def score(self, query: str, passage: str) -> str:
        messages = RELEVANCE_PROMPT.invoke({"query": query, "passage": passage}).to_messages()
        return await self._provider.ainvoke(messages, temperature=0.0, max_tokens=self._max_tokens)
