"""
Test suite for embedding and chat provider factories and the LLM
relevance scorer.

Only offline (fake) providers are constructed; the Google providers need
credentials.

System role: Verification of provider adapters
"""

from unittest.mock import AsyncMock, MagicMock

import pytest
from langchain_core.embeddings import DeterministicFakeEmbedding

from bookrag.boundary.embeddings import get_embedding_provider
from bookrag.boundary.llm import LLMRelevanceScorer, content_to_text, get_chat_provider
from bookrag.boundary.llm.chat_provider import FAKE_RESPONSE
from bookrag.configs.generation import GenerationSettings
from bookrag.configs.vector_store import VectorStoreSettings


class TestEmbeddingProviders:
    """Test suite for get_embedding_provider."""

    def test_fake_provider_should_use_configured_dimension(self) -> None:
        # Act
        provider = get_embedding_provider(VectorStoreSettings(embedding_provider="fake", embedding_dimension=8))

        # Assert
        assert isinstance(provider, DeterministicFakeEmbedding)
        assert len(provider.embed_query("whale")) == 8
        assert provider.embed_query("whale") == provider.embed_query("whale")

    def test_unknown_provider_should_raise(self) -> None:
        with pytest.raises(ValueError, match="Invalid embedding provider"):
            get_embedding_provider(VectorStoreSettings(embedding_provider="acme"))


class TestChatProviders:
    """Test suite for get_chat_provider and LangChainChatProvider."""

    @pytest.fixture
    def provider(self):
        return get_chat_provider(GenerationSettings(provider="fake", model_id="fake-chat"))

    @pytest.mark.asyncio
    async def test_fake_provider_should_stream_full_response(self, provider) -> None:
        # Act
        fragments = [fragment async for fragment in provider.astream([], temperature=0.7, max_tokens=64)]

        # Assert
        assert "".join(fragments) == FAKE_RESPONSE
        assert all(fragments)

    @pytest.mark.asyncio
    async def test_fake_provider_should_invoke(self, provider) -> None:
        assert await provider.ainvoke([], temperature=0.1, max_tokens=64) == FAKE_RESPONSE

    def test_provider_should_reuse_model_per_parameters(self, provider) -> None:
        assert provider._model(0.1, 64) is provider._model(0.1, 64)
        assert provider._model(0.1, 64) is not provider._model(0.7, 64)

    def test_model_name_override_should_win(self) -> None:
        provider = get_chat_provider(GenerationSettings(provider="fake", model_id="a"), model_name="b")

        assert provider.model_name == "b"

    def test_unknown_provider_should_raise(self) -> None:
        with pytest.raises(ValueError, match="GENERATION_PROVIDER"):
            get_chat_provider(GenerationSettings(provider="acme"))


class TestContentToText:
    """Test suite for content_to_text."""

    def test_should_join_part_lists(self) -> None:
        assert content_to_text(["Call ", {"type": "text", "text": "me"}, {"type": "image"}]) == "Call me"

    def test_should_pass_strings_and_blank_values(self) -> None:
        assert content_to_text("Ishmael") == "Ishmael"
        assert content_to_text(None) == ""


class TestLLMRelevanceScorer:
    """Test suite for LLMRelevanceScorer."""

    @pytest.mark.asyncio
    async def test_score_should_ask_provider_deterministically(self) -> None:
        # Arrange
        provider = MagicMock()
        provider.ainvoke = AsyncMock(return_value="0.8")
        scorer = LLMRelevanceScorer(provider)

        # Act
        raw = await scorer.score("Who is Ahab?", "Ahab is the captain.")

        # Assert
        assert raw == "0.8"
        messages = provider.ainvoke.await_args.args[0]
        assert "Who is Ahab?" in messages[-1].content
        assert "Ahab is the captain." in messages[-1].content
        assert provider.ainvoke.await_args.kwargs == {"temperature": 0.0, "max_tokens": 8}
