"""
Hybrid retrieval pipeline.

Runs the vector and keyword signals concurrently, fuses them with RRF,
reranks the fused list and cuts it to top_k. Each signal has its own
timeout inside its client, so the gather never waits longer than the
slower budget.

Dependencies: asyncio, bookrag.core.retrieval
System role: Query-time retrieval orchestration
"""

import asyncio
import logging

from pydantic import BaseModel, Field

from bookrag.core.exceptions import NoRelevantContext
from bookrag.core.retrieval.fusion import reciprocal_rank_fusion
from bookrag.core.retrieval.index_clients import KeywordIndexClient, VectorIndexClient
from bookrag.core.retrieval.reranker import Reranker
from bookrag.models.conversation import SearchType
from bookrag.models.search import FusedCandidate, SearchContext

logger = logging.getLogger(__name__)


class RetrievalResult(BaseModel):
    """Passages selected for one query and which signals produced them."""

    passages: list[FusedCandidate] = Field(default_factory=list)
    search_type: SearchType = SearchType.NONE
    vector_count: int = 0
    keyword_count: int = 0


def _search_type(vector_count: int, keyword_count: int) -> SearchType:
    if vector_count and keyword_count:
        return SearchType.HYBRID
    if vector_count:
        return SearchType.VECTOR_ONLY
    if keyword_count:
        return SearchType.KEYWORD_ONLY
    return SearchType.NONE


class HybridRetriever:
    """Concurrent fan-out, fusion and reranking."""

    def __init__(
        self,
        vector_client: VectorIndexClient,
        keyword_client: KeywordIndexClient,
        reranker: Reranker | None = None,
        candidate_pool_size: int = 20,
        keyword_weight: float = 0.7,
    ) -> None:
        self._vector_client = vector_client
        self._keyword_client = keyword_client
        self._reranker = reranker
        self._candidate_pool_size = candidate_pool_size
        self._keyword_weight = keyword_weight

    async def retrieve(self, query: str, context: SearchContext) -> RetrievalResult:
        """
        Retrieve the passages that ground an answer.

        Args:
            query: Query text
            context: top_k, filters and similarity threshold

        Returns:
            RetrievalResult: At most context.top_k passages, best first

        Raises:
            NoRelevantContext: If neither signal produced a candidate
        """
        pool = max(self._candidate_pool_size, context.top_k)

        vector, keyword = await asyncio.gather(
            self._vector_client.search(query, pool, context),
            self._keyword_client.search(query, pool, context),
        )

        fused = reciprocal_rank_fusion(vector, keyword, keyword_weight=self._keyword_weight)
        if not fused:
            raise NoRelevantContext(
                "No passages matched the query",
                details={"filters": context.filters()},
            )

        if self._reranker is not None:
            fused = await self._reranker.rerank(query, fused)

        result = RetrievalResult(
            passages=fused[: context.top_k],
            search_type=_search_type(len(vector), len(keyword)),
            vector_count=len(vector),
            keyword_count=len(keyword),
        )
        logger.info(
            f"{__name__}:retrieve - Retrieved {len(result.passages)} passages",
            extra={
                "search_type": result.search_type.value,
                "vector_count": result.vector_count,
                "keyword_count": result.keyword_count,
            },
        )
        return result


def confidence_score(passages: list[FusedCandidate], keyword_weight: float = 0.7) -> float:
    """
    Mean relevance of the passages used for an answer, in [0, 1].

    Reranked passages contribute their rerank score; the rest contribute
    their fused score relative to the best possible fused score
    (first in both lists).
    """
    if not passages:
        return 0.0
    best_fused = 1.0 + keyword_weight
    scores = [
        passage.rerank_score if passage.rerank_score is not None else min(passage.fused_score / best_fused, 1.0)
        for passage in passages
    ]
    return round(sum(scores) / len(scores), 4)
