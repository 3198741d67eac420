"""
Database boundary layer: ORM models, CRUD helpers, connection management
and the conversation repository.

Dependencies: sqlalchemy, bookrag.configs
System role: Persistence for conversations, messages and search logs
"""

from bookrag.boundary.db.base import Base, TimestampMixin, UTCDateTime, UUIDMixin
from bookrag.boundary.db.connection import (
    create_all_tables,
    get_async_db,
    get_async_engine,
    get_async_session_factory,
)
from bookrag.boundary.db.CRUD import BaseCRUD
from bookrag.boundary.db.models import ConversationModel, MessageModel, SearchLogModel
from bookrag.boundary.db.repository import ConversationRepository

__all__ = [
    "Base",
    "TimestampMixin",
    "UTCDateTime",
    "UUIDMixin",
    "create_all_tables",
    "get_async_db",
    "get_async_engine",
    "get_async_session_factory",
    "BaseCRUD",
    "ConversationModel",
    "MessageModel",
    "SearchLogModel",
    "ConversationRepository",
]
