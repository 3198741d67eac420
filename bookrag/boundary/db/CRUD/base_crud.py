"""
Base CRUD operations for SQLAlchemy models.

Generic create/read/update helpers shared by the repository. Callers own
the session and the transaction.

Dependencies: sqlalchemy
System role: Foundation for database operations
"""

from collections.abc import Sequence
from typing import Any, Generic, TypeVar
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from bookrag.boundary.db.base import Base

ModelT = TypeVar("ModelT", bound=Base)


class BaseCRUD(Generic[ModelT]):
    """
    Generic base class for CRUD operations.

    Attributes:
        model: The SQLAlchemy model class to operate on
    """

    def __init__(self, model: type[ModelT]) -> None:
        self.model = model

    async def create(self, session: AsyncSession, **kwargs) -> ModelT:
        """
        Create a new record.

        Args:
            session: Async database session
            **kwargs: Model field values

        Returns:
            Created model instance with generated ID and timestamps
        """
        instance = self.model(**kwargs)
        session.add(instance)
        await session.flush()
        await session.refresh(instance)
        return instance

    async def get_by_id(self, session: AsyncSession, id: UUID) -> ModelT | None:
        stmt = select(self.model).where(self.model.id == id)
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_where(
        self,
        session: AsyncSession,
        *criteria: Any,
        order_by: Any = None,
        limit: int | None = None,
    ) -> Sequence[ModelT]:
        """
        Retrieve records matching criteria.

        Args:
            session: Async database session
            *criteria: SQLAlchemy filter expressions
            order_by: Ordering expression
            limit: Maximum number of records (None for all)
        """
        stmt = select(self.model).where(*criteria)
        if order_by is not None:
            stmt = stmt.order_by(order_by)
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await session.execute(stmt)
        return result.scalars().all()

    async def update_by_id(self, session: AsyncSession, id: UUID, **values) -> bool:
        """
        Update a record by primary key.

        Values may be SQL expressions, e.g. ``Model.counter + 1``.

        Returns:
            True if a row was updated
        """
        stmt = update(self.model).where(self.model.id == id).values(**values)
        result = await session.execute(stmt)
        return result.rowcount > 0
