"""
Keyword index factory.

Maps keyword backend names to constructors; RETRIEVAL_KEYWORD_INDEX_TYPE
selects one.

Dependencies: bookrag.boundary.keyword, bookrag.configs
System role: Keyword index instantiation and selection
"""

import logging
from collections.abc import Callable

from bookrag.boundary.keyword.bm25_index import BM25KeywordIndex
from bookrag.configs.retrieval import RetrievalSettings

logger = logging.getLogger(__name__)

KEYWORD_INDEXES: dict[str, Callable[[RetrievalSettings], BM25KeywordIndex]] = {
    "bm25": lambda settings: BM25KeywordIndex(title_boost=settings.title_boost),
}


def get_keyword_index(settings: RetrievalSettings) -> BM25KeywordIndex:
    """
    Build the keyword index named in settings.

    Raises:
        ValueError: If the index type is unknown
    """
    index_type = settings.keyword_index_type.lower()
    factory = KEYWORD_INDEXES.get(index_type)
    if factory is None:
        raise ValueError(
            f"Invalid RETRIEVAL_KEYWORD_INDEX_TYPE: {index_type}. Must be one of {sorted(KEYWORD_INDEXES)}."
        )
    logger.info(f"{__name__}:get_keyword_index - Creating '{index_type}' keyword index")
    return factory(settings)
