"""
Keyword index boundary layer.

Lexical (BM25) search over chunk text with title boosting.

Dependencies: rank_bm25
System role: Keyword signal for hybrid retrieval
"""

from bookrag.boundary.keyword.bm25_index import BM25KeywordIndex, KeywordSearchResult, tokenize_for_bm25
from bookrag.boundary.keyword.keyword_index_factory import KEYWORD_INDEXES, get_keyword_index

__all__ = [
    "BM25KeywordIndex",
    "KeywordSearchResult",
    "tokenize_for_bm25",
    "KEYWORD_INDEXES",
    "get_keyword_index",
]
