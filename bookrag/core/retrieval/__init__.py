"""
Hybrid retrieval: index clients, rank fusion, reranking.
"""

from bookrag.core.retrieval.fusion import reciprocal_rank_fusion
from bookrag.core.retrieval.hybrid import HybridRetriever, RetrievalResult, confidence_score
from bookrag.core.retrieval.index_clients import KeywordIndexClient, VectorIndexClient
from bookrag.core.retrieval.reranker import RelevanceScorer, Reranker, parse_relevance

__all__ = [
    "HybridRetriever",
    "KeywordIndexClient",
    "RelevanceScorer",
    "Reranker",
    "RetrievalResult",
    "VectorIndexClient",
    "confidence_score",
    "parse_relevance",
    "reciprocal_rank_fusion",
]
