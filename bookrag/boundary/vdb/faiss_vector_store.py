"""
FAISS vector store.

Wraps LangChain FAISS over a flat inner-product index. Vectors are
L2-normalized before insertion and search, so inner product equals cosine
similarity. Metadata filters (book_id, category) are evaluated by LangChain
on an enlarged candidate pool before the top-k cut.

Dependencies: faiss-cpu, langchain_community, numpy
System role: Default vector backend
"""

import logging
import threading

import faiss
from langchain_community.docstore.in_memory import InMemoryDocstore
from langchain_community.vectorstores import FAISS
from langchain_community.vectorstores.utils import DistanceStrategy
from langchain_core.embeddings import Embeddings

from bookrag.boundary.vdb.vector_schemas import VectorSearchResult, normalize
from bookrag.models.chunk import Chunk

logger = logging.getLogger(__name__)


class FAISSVectorStore:
    """
    FAISS vector store keyed by chunk id.

    Keeps a book -> chunk ids map so re-ingesting a book can remove the
    previous generation of its chunks.
    """

    def __init__(
        self,
        embeddings: Embeddings,
        dimension: int,
        fetch_multiplier: int = 5,
    ) -> None:
        """
        Initialize an empty FAISS index.

        Args:
            embeddings: Embedding function LangChain keeps on the store
            dimension: Vector dimension
            fetch_multiplier: Candidate pool factor used when filtering
        """
        self._dimension = dimension
        self._fetch_multiplier = fetch_multiplier
        self._lock = threading.Lock()
        self._book_ids: dict[str, set[str]] = {}

        self._vector_store = FAISS(
            embedding_function=embeddings,
            index=faiss.IndexFlatIP(dimension),
            docstore=InMemoryDocstore(),
            index_to_docstore_id={},
            distance_strategy=DistanceStrategy.MAX_INNER_PRODUCT,
        )
        logger.info(f"{__name__}:__init__ - FAISS IndexFlatIP created", extra={"dimension": dimension})

    def add(self, entries: list[tuple[Chunk, list[float]]]) -> list[str]:
        """
        Insert or replace chunks.

        Args:
            entries: (chunk, vector) pairs

        Returns:
            list[str]: Stored chunk ids
        """
        if not entries:
            return []

        ids = [chunk.chunk_id for chunk, _ in entries]
        with self._lock:
            stored = set(self._vector_store.index_to_docstore_id.values())
            existing = [chunk_id for chunk_id in ids if chunk_id in stored]
            if existing:
                self._vector_store.delete(ids=existing)

            self._vector_store.add_embeddings(
                text_embeddings=[(chunk.text, normalize(vector).tolist()) for chunk, vector in entries],
                metadatas=[chunk.metadata() for chunk, _ in entries],
                ids=ids,
            )
            for chunk, _ in entries:
                self._book_ids.setdefault(chunk.book_id, set()).add(chunk.chunk_id)

        logger.info(f"{__name__}:add - Added {len(ids)} vectors")
        return ids

    def delete_book(self, book_id: str) -> int:
        with self._lock:
            chunk_ids = sorted(self._book_ids.pop(book_id, set()))
            if chunk_ids:
                self._vector_store.delete(ids=chunk_ids)
        logger.info(f"{__name__}:delete_book - Removed {len(chunk_ids)} vectors", extra={"book_id": book_id})
        return len(chunk_ids)

    def similarity_search(
        self,
        embedding: list[float],
        k: int,
        filters: dict[str, str] | None = None,
    ) -> list[VectorSearchResult]:
        """
        Search for the most similar chunks.

        Args:
            embedding: Query vector
            k: Number of results to return
            filters: Exact-match metadata filters

        Returns:
            list[VectorSearchResult]: Results by descending similarity
        """
        with self._lock:
            if self._vector_store.index.ntotal == 0:
                return []
            results = self._vector_store.similarity_search_with_score_by_vector(
                normalize(embedding).tolist(),
                k=k,
                filter=filters or None,
                fetch_k=max(k * self._fetch_multiplier, k),
            )

        return [
            VectorSearchResult(
                chunk=Chunk.from_metadata(doc.page_content, doc.metadata),
                similarity_score=float(score),
            )
            for doc, score in results
        ]

    def count(self) -> int:
        with self._lock:
            return self._vector_store.index.ntotal
