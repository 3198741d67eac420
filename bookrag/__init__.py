"""
bookrag - retrieval-augmented question answering over ingested book text.

Packages:
- configs: pydantic-settings configuration
- models: pydantic value objects and API contracts
- core: chunking, retrieval, fusion, reranking, generation, resilience, cache
- boundary: vector store, keyword index, providers, persistence, book catalog
- application: ingestion, search and chat services
- api: FastAPI surface
- observability: logging configuration
"""

__version__ = "0.1.0"
