"""
Vector store factory.

Maps backend names to constructors; VECTOR_STORE_STORE_TYPE selects one.
Provides consistent interface regardless of underlying implementation.

Dependencies: bookrag.boundary.vdb, bookrag.configs
System role: Vector store instantiation and selection
"""

import logging
from collections.abc import Callable

from langchain_core.embeddings import Embeddings

from bookrag.boundary.vdb.faiss_vector_store import FAISSVectorStore
from bookrag.boundary.vdb.memory_vector_store import InMemoryVectorStore
from bookrag.boundary.vdb.vector_schemas import VectorStore
from bookrag.configs.vector_store import VectorStoreSettings

logger = logging.getLogger(__name__)

VECTOR_STORES: dict[str, Callable[[VectorStoreSettings, Embeddings], VectorStore]] = {
    "faiss": lambda settings, embeddings: FAISSVectorStore(
        embeddings=embeddings,
        dimension=settings.embedding_dimension,
    ),
    "memory": lambda settings, embeddings: InMemoryVectorStore(dimension=settings.embedding_dimension),
}


def get_vector_store(settings: VectorStoreSettings, embeddings: Embeddings) -> VectorStore:
    """
    Build the vector store named in settings.

    Args:
        settings: Vector store settings
        embeddings: Embedding provider (kept by backends that need one)

    Returns:
        VectorStore: Configured vector store instance

    Raises:
        ValueError: If the store type is unknown
    """
    store_type = settings.store_type.lower()
    factory = VECTOR_STORES.get(store_type)
    if factory is None:
        raise ValueError(
            f"Invalid VECTOR_STORE_STORE_TYPE: {store_type}. Must be one of {sorted(VECTOR_STORES)}."
        )
    logger.info(f"{__name__}:get_vector_store - Creating '{store_type}' vector store")
    return factory(settings, embeddings)
