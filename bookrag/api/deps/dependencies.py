"""
Dependency providers.

Routers get services from the container the lifespan stored on
``app.state``.

Dependencies: fastapi, bookrag.application
System role: DI for routers
"""

from fastapi import Request

from bookrag.application.container import RagContainer
from bookrag.application.services import ChatService, IngestionService, SearchService


def get_container(request: Request) -> RagContainer:
    return request.app.state.container


def get_search_service(request: Request) -> SearchService:
    return get_container(request).search_service


def get_chat_service(request: Request) -> ChatService:
    return get_container(request).chat_service


def get_ingestion_service(request: Request) -> IngestionService:
    return get_container(request).ingestion_service
