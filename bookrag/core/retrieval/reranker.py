"""
Relevance reranker.

Rescores the head of the fused list with a relevance scorer and reorders
it. Scoring is per candidate and failure-tolerant: an exception or an
unusable reply gives that candidate the default score instead of failing
the request.

Dependencies: bookrag.models
System role: Reranking stage of hybrid retrieval
"""

import asyncio
import logging
import re
from typing import Protocol

from bookrag.models.search import FusedCandidate

logger = logging.getLogger(__name__)

_NUMBER = re.compile(r"^\s*([+-]?(?:\d+(?:\.\d*)?|\.\d+))\s*$")


class RelevanceScorer(Protocol):
    async def score(self, query: str, passage: str) -> str | float: ...


def parse_relevance(raw: str | float) -> float | None:
    """
    Parse a scorer reply into a score in [0, 1].

    Returns:
        float | None: Score, or None if the reply is not a single number in range
    """
    if isinstance(raw, (int, float)) and not isinstance(raw, bool):
        value = float(raw)
    else:
        match = _NUMBER.match(str(raw))
        if match is None:
            return None
        value = float(match.group(1))
    if not 0.0 <= value <= 1.0:
        return None
    return value


class Reranker:
    """Reorders the top fused candidates by scored relevance."""

    def __init__(
        self,
        scorer: RelevanceScorer,
        max_candidates: int = 20,
        min_candidates: int = 4,
        default_score: float = 0.5,
        max_concurrency: int = 5,
    ) -> None:
        """
        Initialize reranker.

        Args:
            scorer: Relevance scorer (usually LLM-backed)
            max_candidates: Shortlist size that gets scored
            min_candidates: Below this many candidates the list is returned as-is
            default_score: Score for candidates that could not be scored
            max_concurrency: Concurrent scorer calls
        """
        self._scorer = scorer
        self.max_candidates = max_candidates
        self.min_candidates = min_candidates
        self.default_score = default_score
        self._max_concurrency = max_concurrency

    async def _score_one(self, query: str, candidate: FusedCandidate, semaphore: asyncio.Semaphore) -> float:
        async with semaphore:
            try:
                raw = await self._scorer.score(query, candidate.chunk.text)
            except Exception as e:
                logger.warning(
                    f"{__name__}:_score_one - Scorer failed, using default score",
                    extra={"chunk_id": candidate.chunk_id, "error_type": type(e).__name__},
                )
                return self.default_score

        score = parse_relevance(raw)
        if score is None:
            logger.warning(
                f"{__name__}:_score_one - Unusable scorer output, using default score",
                extra={"chunk_id": candidate.chunk_id, "raw": str(raw)[:50]},
            )
            return self.default_score
        return score

    async def rerank(self, query: str, candidates: list[FusedCandidate]) -> list[FusedCandidate]:
        """
        Rerank fused candidates.

        Args:
            query: Query text
            candidates: Fused candidates, best first

        Returns:
            list[FusedCandidate]: Scored shortlist by score descending (ties keep
            fused order), followed by the unscored tail in fused order
        """
        if len(candidates) < self.min_candidates:
            return candidates

        head = candidates[: self.max_candidates]
        tail = candidates[self.max_candidates:]

        semaphore = asyncio.Semaphore(self._max_concurrency)
        scores = await asyncio.gather(*(self._score_one(query, candidate, semaphore) for candidate in head))

        scored = [
            candidate.model_copy(update={"rerank_score": score})
            for candidate, score in zip(head, scores)
        ]
        scored.sort(key=lambda c: -c.rerank_score)

        logger.info(f"{__name__}:rerank - Reranked {len(head)} candidates", extra={"unscored": len(tail)})
        return scored + tail
