"""
Search API endpoint.

Routes: POST /search

Dependencies: bookrag.application.services.search_service
System role: Non-streaming question answering HTTP API
"""

import logging

from fastapi import APIRouter, Depends, HTTPException

from bookrag.api.deps import get_search_service
from bookrag.application.services import SearchService
from bookrag.core.exceptions import BookRagException, InvalidQuery
from bookrag.models.api import SearchRequest, SearchResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/search", tags=["search"])


@router.post("", response_model=SearchResponse)
async def search(
    request: SearchRequest,
    search_service: SearchService = Depends(get_search_service),
) -> SearchResponse:
    """
    Answer a question from the indexed books with cited sources.

    Raises:
        HTTPException(422): Empty or unusable query
        HTTPException(503): Search could not be served
    """
    try:
        return await search_service.search(request)
    except InvalidQuery as e:
        raise HTTPException(status_code=422, detail=e.message)
    except BookRagException as e:
        logger.error(f"{__name__}:search - Search failed", extra={"error": str(e)})
        raise HTTPException(status_code=503, detail=e.message)
