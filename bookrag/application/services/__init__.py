"""
Application services: ingestion, search and chat.
"""

from bookrag.application.services.chat_service import ChatService, ConversationLocks
from bookrag.application.services.ingestion_service import IngestionService
from bookrag.application.services.search_service import SearchService

__all__ = [
    "ChatService",
    "ConversationLocks",
    "IngestionService",
    "SearchService",
]
