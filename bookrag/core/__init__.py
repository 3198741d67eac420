"""
Core business logic module.

Chunking, embedding, hybrid retrieval, generation, resilience and caching,
plus the exception hierarchy shared across layers.
"""

from bookrag.core.exceptions import (
    BookNotFound,
    BookRagException,
    CircuitOpenError,
    ConversationNotFound,
    EmbeddingProviderUnavailable,
    GenerationProviderUnavailable,
    IndexUnavailable,
    InvalidQuery,
    MalformedDocument,
    NoRelevantContext,
)

__all__ = [
    "BookNotFound",
    "BookRagException",
    "CircuitOpenError",
    "ConversationNotFound",
    "EmbeddingProviderUnavailable",
    "GenerationProviderUnavailable",
    "IndexUnavailable",
    "InvalidQuery",
    "MalformedDocument",
    "NoRelevantContext",
]
