"""
Test suite for Reranker and relevance parsing.

System role: Verification of failure-tolerant reranking
"""

from unittest.mock import AsyncMock

import pytest

from bookrag.core.retrieval.reranker import Reranker, parse_relevance


class TestParseRelevance:
    """Test suite for parse_relevance."""

    @pytest.mark.parametrize("raw, expected", [("0.8", 0.8), (" 1 ", 1.0), ("0", 0.0), (".25", 0.25), (0.4, 0.4)])
    def test_parse_should_accept_single_number_in_range(self, raw, expected: float) -> None:
        assert parse_relevance(raw) == pytest.approx(expected)

    @pytest.mark.parametrize("raw", ["1.5", "-0.1", "very relevant", "0.8 because", "", True])
    def test_parse_should_reject_unusable_output(self, raw) -> None:
        assert parse_relevance(raw) is None


class TestRerankerRerank:
    """Test suite for Reranker.rerank."""

    @pytest.mark.asyncio
    async def test_rerank_should_skip_when_fewer_than_min_candidates(self, make_fused) -> None:
        # Arrange
        scorer = AsyncMock()
        reranker = Reranker(scorer, min_candidates=4)
        candidates = make_fused(3)

        # Act
        result = await reranker.rerank("query", candidates)

        # Assert
        assert result == candidates
        scorer.score.assert_not_called()

    @pytest.mark.asyncio
    async def test_rerank_should_order_by_score(self, make_fused) -> None:
        # Arrange
        scores = {"passage number 0": "0.1", "passage number 1": "0.9", "passage number 2": "0.5", "passage number 3": "0.7"}
        scorer = AsyncMock()
        scorer.score.side_effect = lambda query, passage: scores[passage]
        reranker = Reranker(scorer)

        # Act
        result = await reranker.rerank("query", make_fused(4))

        # Assert
        assert [candidate.chunk.chunk_index for candidate in result] == [1, 3, 2, 0]
        assert [candidate.rerank_score for candidate in result] == [0.9, 0.7, 0.5, 0.1]

    @pytest.mark.asyncio
    async def test_rerank_should_use_default_score_on_failure(self, make_fused) -> None:
        # Arrange
        async def score(query: str, passage: str) -> str:
            if passage == "passage number 2":
                raise RuntimeError("provider down")
            if passage == "passage number 3":
                return "not a number"
            return "0.9"

        scorer = AsyncMock()
        scorer.score.side_effect = score
        reranker = Reranker(scorer, default_score=0.5)

        # Act
        result = await reranker.rerank("query", make_fused(4))

        # Assert
        by_index = {candidate.chunk.chunk_index: candidate.rerank_score for candidate in result}
        assert by_index == {0: 0.9, 1: 0.9, 2: 0.5, 3: 0.5}
        # Ties keep fused order.
        assert [candidate.chunk.chunk_index for candidate in result] == [0, 1, 2, 3]

    @pytest.mark.asyncio
    async def test_rerank_should_only_score_shortlist(self, make_fused) -> None:
        # Arrange
        scorer = AsyncMock()
        scorer.score.return_value = "0.3"
        reranker = Reranker(scorer, max_candidates=4)

        # Act
        result = await reranker.rerank("query", make_fused(6))

        # Assert
        assert scorer.score.await_count == 4
        assert [candidate.rerank_score for candidate in result[4:]] == [None, None]
        assert [candidate.chunk.chunk_index for candidate in result[4:]] == [4, 5]

    @pytest.mark.asyncio
    async def test_rerank_should_not_mutate_input(self, make_fused) -> None:
        scorer = AsyncMock()
        scorer.score.return_value = "0.6"
        candidates = make_fused(4)

        await Reranker(scorer).rerank("query", candidates)

        assert all(candidate.rerank_score is None for candidate in candidates)
