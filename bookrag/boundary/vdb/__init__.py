"""
Vector database boundary layer.

Provides vector store backends for storage and similarity retrieval.
- FAISSVectorStore: LangChain FAISS over a flat inner-product index
- InMemoryVectorStore: numpy cosine scan

Dependencies: langchain_community, faiss, numpy
System role: Vector store adapters for RAG retrieval
"""

from bookrag.boundary.vdb.vector_schemas import VectorSearchResult, VectorStore
from bookrag.boundary.vdb.vector_store_factory import VECTOR_STORES, get_vector_store

__all__ = [
    "VectorSearchResult",
    "VectorStore",
    "VECTOR_STORES",
    "get_vector_store",
]
