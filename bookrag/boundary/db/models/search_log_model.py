"""
Search log ORM model.

Usage record for each search request.

Dependencies: sqlalchemy, bookrag.boundary.db.base
System role: Search analytics persistence
"""

from sqlalchemy import JSON, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from bookrag.boundary.db.base import Base, TimestampMixin, UUIDMixin


class SearchLogModel(Base, UUIDMixin, TimestampMixin):
    """Search log ORM model."""

    __tablename__ = "search_logs"

    query: Mapped[str] = mapped_column(Text, nullable=False)
    search_type: Mapped[str] = mapped_column(String(32), nullable=False)
    results_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    response_time_ms: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    filters_applied: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    user_id: Mapped[str | None] = mapped_column(String(255), nullable=True, index=True)
