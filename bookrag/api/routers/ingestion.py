"""
Ingestion API endpoint.

Routes: POST /books/{book_id}/ingest

Dependencies: bookrag.application.services.ingestion_service
System role: Ingestion trigger HTTP API
"""

import logging

from fastapi import APIRouter, Depends, HTTPException

from bookrag.api.deps import get_ingestion_service
from bookrag.application.services import IngestionService
from bookrag.core.exceptions import BookNotFound, EmbeddingProviderUnavailable
from bookrag.models.api import IngestionResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/books", tags=["ingestion"])


@router.post("/{book_id}/ingest", response_model=IngestionResponse)
async def ingest_book(
    book_id: str,
    ingestion_service: IngestionService = Depends(get_ingestion_service),
) -> IngestionResponse:
    """
    Chunk, embed and index one book from the catalog.

    Raises:
        HTTPException(404): Book not in the catalog
        HTTPException(503): Embedding provider unavailable
    """
    try:
        return await ingestion_service.ingest_book(book_id)
    except BookNotFound as e:
        raise HTTPException(status_code=404, detail=e.message)
    except EmbeddingProviderUnavailable as e:
        logger.error(f"{__name__}:ingest_book - Embedding failed", extra={"book_id": book_id, "error": str(e)})
        raise HTTPException(status_code=503, detail=e.message)
