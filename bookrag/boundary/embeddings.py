"""
Embedding providers.

Maps provider names to LangChain ``Embeddings`` implementations. The
Google provider wraps GoogleGenerativeAIEmbeddings so every call uses the
configured output dimensionality; the fake provider is deterministic and
offline, for development and tests.

Dependencies: langchain_core, langchain_google_genai
System role: Embedding capability selected by configuration
"""

import logging
from collections.abc import Callable

from langchain_core.embeddings import DeterministicFakeEmbedding, Embeddings
from langchain_google_genai import GoogleGenerativeAIEmbeddings

from bookrag.configs.vector_store import VectorStoreSettings

logger = logging.getLogger(__name__)


class FixedDimensionEmbeddings(GoogleGenerativeAIEmbeddings):
    """
    GoogleGenerativeAIEmbeddings wrapper with fixed output dimensionality.

    The base class ignores output_dimensionality in the constructor, so the
    configured dimension is passed explicitly on every embed call.
    """

    _output_dimensionality: int = 768

    def __init__(
        self,
        model: str = "models/gemini-embedding-001",
        output_dimensionality: int = 768,
        **kwargs,
    ) -> None:
        """
        Initialize embeddings with fixed output dimensionality.

        Args:
            model: Google embedding model ID
            output_dimensionality: Fixed dimension for all embeddings
            **kwargs: Additional arguments for GoogleGenerativeAIEmbeddings
        """
        super().__init__(model=model, **kwargs)
        self._output_dimensionality = output_dimensionality
        logger.info(
            f"{__name__}:__init__ - Initialized with model={model}, "
            f"output_dimensionality={output_dimensionality}"
        )

    def embed_documents(
        self,
        texts: list[str],
        *,
        batch_size: int = 100,
        task_type: str | None = None,
        titles: list[str] | None = None,
        output_dimensionality: int | None = None,
    ) -> list[list[float]]:
        dim = output_dimensionality or self._output_dimensionality
        return super().embed_documents(
            texts,
            batch_size=batch_size,
            task_type=task_type,
            titles=titles,
            output_dimensionality=dim,
        )

    def embed_query(
        self,
        text: str,
        task_type: str | None = None,
        title: str | None = None,
        output_dimensionality: int | None = None,
    ) -> list[float]:
        dim = output_dimensionality or self._output_dimensionality
        return super().embed_query(
            text,
            task_type=task_type,
            title=title,
            output_dimensionality=dim,
        )


def _google(settings: VectorStoreSettings) -> Embeddings:
    return FixedDimensionEmbeddings(
        model=settings.embedding_model,
        output_dimensionality=settings.embedding_dimension,
    )


def _fake(settings: VectorStoreSettings) -> Embeddings:
    return DeterministicFakeEmbedding(size=settings.embedding_dimension)


EMBEDDING_PROVIDERS: dict[str, Callable[[VectorStoreSettings], Embeddings]] = {
    "google": _google,
    "fake": _fake,
}


def get_embedding_provider(settings: VectorStoreSettings) -> Embeddings:
    """
    Build the embedding provider named in settings.

    Args:
        settings: Vector store settings (provider name, model, dimension)

    Returns:
        Embeddings: LangChain embeddings implementation

    Raises:
        ValueError: If the provider name is unknown
    """
    name = settings.embedding_provider.lower()
    factory = EMBEDDING_PROVIDERS.get(name)
    if factory is None:
        raise ValueError(
            f"Invalid embedding provider: {name}. Must be one of {sorted(EMBEDDING_PROVIDERS)}."
        )
    logger.info(f"{__name__}:get_embedding_provider - Creating '{name}' embeddings")
    return factory(settings)
