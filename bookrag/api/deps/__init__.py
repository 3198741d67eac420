from bookrag.api.deps.dependencies import (
    get_chat_service,
    get_container,
    get_ingestion_service,
    get_search_service,
)

__all__ = [
    "get_chat_service",
    "get_container",
    "get_ingestion_service",
    "get_search_service",
]
