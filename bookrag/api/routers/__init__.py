"""API routers."""

from .chat_stream import router as chat_stream_router
from .conversations import router as conversations_router
from .health import router as health_router
from .ingestion import router as ingestion_router
from .search import router as search_router

__all__ = [
    "chat_stream_router",
    "conversations_router",
    "health_router",
    "ingestion_router",
    "search_router",
]
