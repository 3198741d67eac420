"""
Test suite for reciprocal rank fusion.

System role: Verification of rank fusion ordering and tie-breaking
"""

import pytest

from bookrag.core.retrieval.fusion import reciprocal_rank_fusion
from bookrag.models.search import SignalSource

VECTOR = SignalSource.VECTOR
KEYWORD = SignalSource.KEYWORD


def _names(fused) -> list[str]:
    return [candidate.chunk.book_id for candidate in fused]


class TestReciprocalRankFusion:
    """Test suite for reciprocal_rank_fusion."""

    def test_fusion_should_rank_worked_example(self, make_candidate) -> None:
        # Arrange
        vector = [make_candidate("C3"), make_candidate("C1"), make_candidate("C5")]
        keyword = [make_candidate("C1", KEYWORD), make_candidate("C2", KEYWORD)]

        # Act
        fused = reciprocal_rank_fusion(vector, keyword, keyword_weight=0.7)

        # Assert
        assert _names(fused) == ["C1", "C3", "C2", "C5"]
        scores = {candidate.chunk.book_id: candidate.fused_score for candidate in fused}
        assert scores["C1"] == pytest.approx(1.2)
        assert scores["C3"] == pytest.approx(1.0)
        assert scores["C2"] == pytest.approx(0.35)
        assert scores["C5"] == pytest.approx(1 / 3)

    def test_fusion_should_record_ranks_and_signals(self, make_candidate) -> None:
        # Arrange
        vector = [make_candidate("C3"), make_candidate("C1")]
        keyword = [make_candidate("C1", KEYWORD)]

        # Act
        fused = reciprocal_rank_fusion(vector, keyword)
        c1 = next(candidate for candidate in fused if candidate.chunk.book_id == "C1")

        # Assert
        assert c1.vector_rank == 2
        assert c1.keyword_rank == 1
        assert c1.contributing_signals == [VECTOR, KEYWORD]
        assert c1.rerank_score is None

    def test_candidate_first_in_both_lists_should_rank_first(self, make_candidate) -> None:
        # Arrange
        vector = [make_candidate("A"), make_candidate("B"), make_candidate("C")]
        keyword = [make_candidate("A", KEYWORD), make_candidate("C", KEYWORD), make_candidate("D", KEYWORD)]

        # Act
        fused = reciprocal_rank_fusion(vector, keyword, keyword_weight=1.0)

        # Assert
        assert fused[0].chunk.book_id == "A"

    def test_ties_should_prefer_vector_ranked_candidate(self, make_candidate) -> None:
        # Arrange: equal weight makes vector #1 and keyword #1 tie at 1.0
        vector = [make_candidate("V")]
        keyword = [make_candidate("K", KEYWORD)]

        # Act
        fused = reciprocal_rank_fusion(vector, keyword, keyword_weight=1.0)

        # Assert
        assert _names(fused) == ["V", "K"]

    def test_duplicates_should_count_only_first_position(self, make_candidate) -> None:
        # Arrange
        vector = [make_candidate("A"), make_candidate("B"), make_candidate("A")]

        # Act
        fused = reciprocal_rank_fusion(vector, [])

        # Assert
        assert len(fused) == 2
        assert fused[0].fused_score == pytest.approx(1.0)
        assert fused[0].vector_rank == 1

    def test_single_signal_should_keep_its_order(self, make_candidate) -> None:
        keyword = [make_candidate(name, KEYWORD) for name in ("K1", "K2", "K3")]

        fused = reciprocal_rank_fusion([], keyword)

        assert _names(fused) == ["K1", "K2", "K3"]
        assert all(candidate.vector_rank is None for candidate in fused)

    def test_empty_inputs_should_give_empty_list(self) -> None:
        assert reciprocal_rank_fusion([], []) == []
