"""
Reciprocal rank fusion.

Combines the vector and keyword candidate lists by rank rather than by raw
score, so the two incomparable scoring scales never need calibrating. A
candidate at 0-indexed position i contributes 1/(i+1); keyword
contributions are damped by ``keyword_weight``. Contributions for the same
chunk id are summed.

Dependencies: bookrag.models
System role: Rank fusion stage of hybrid retrieval
"""

from bookrag.models.search import FusedCandidate, SearchCandidate, SignalSource


def _first_positions(candidates: list[SearchCandidate]) -> dict[str, tuple[int, SearchCandidate]]:
    # Repeated ids count only at their first (best) position.
    positions: dict[str, tuple[int, SearchCandidate]] = {}
    for position, candidate in enumerate(candidates):
        positions.setdefault(candidate.chunk_id, (position, candidate))
    return positions


def reciprocal_rank_fusion(
    vector: list[SearchCandidate],
    keyword: list[SearchCandidate],
    keyword_weight: float = 0.7,
) -> list[FusedCandidate]:
    """
    Fuse two ranked candidate lists.

    Ordering is by fused score descending. Ties go to the better vector
    rank (candidates with a vector rank before those without), then the
    better keyword rank, then chunk id.

    Args:
        vector: Vector-signal candidates, best first
        keyword: Keyword-signal candidates, best first
        keyword_weight: Damping factor for keyword contributions

    Returns:
        list[FusedCandidate]: Fused candidates, best first. Ranks are 1-based.
    """
    vector_positions = _first_positions(vector)
    keyword_positions = _first_positions(keyword)

    fused: list[FusedCandidate] = []
    for chunk_id in {**vector_positions, **keyword_positions}:
        score = 0.0
        signals: list[SignalSource] = []
        vector_rank = keyword_rank = None
        payload = None

        if chunk_id in vector_positions:
            position, candidate = vector_positions[chunk_id]
            score += 1.0 / (position + 1)
            vector_rank = position + 1
            signals.append(SignalSource.VECTOR)
            payload = candidate.chunk

        if chunk_id in keyword_positions:
            position, candidate = keyword_positions[chunk_id]
            score += keyword_weight / (position + 1)
            keyword_rank = position + 1
            signals.append(SignalSource.KEYWORD)
            payload = payload or candidate.chunk

        fused.append(
            FusedCandidate(
                chunk_id=chunk_id,
                fused_score=score,
                contributing_signals=signals,
                vector_rank=vector_rank,
                keyword_rank=keyword_rank,
                chunk=payload,
            )
        )

    fused.sort(
        key=lambda c: (
            -c.fused_score,
            c.vector_rank is None,
            c.vector_rank or 0,
            c.keyword_rank is None,
            c.keyword_rank or 0,
            c.chunk_id,
        )
    )
    return fused
