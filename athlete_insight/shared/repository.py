"""
Base repository with common CRUD operations.

Provides generic database operations for all cache repositories.
Uses SQLAlchemy async session for non-blocking database access.

Usage:
    class ActivityRepository(BaseRepository[ActivityRow]):
        def __init__(self, db: AsyncSession):
            super().__init__(db, ActivityRow)

        async def all_by_start_date(self) -> list[ActivityRow]:
            ...
"""

from typing import TypeVar, Generic, Type
from sqlalchemy import select, delete, func
from sqlalchemy.ext.asyncio import AsyncSession

T = TypeVar("T")


class BaseRepository(Generic[T]):
    """
    Base repository for database operations.

    Provides common CRUD methods that can be inherited by cache repositories.
    Transactions are owned by the caller; methods only flush.
    """

    def __init__(self, db: AsyncSession, model: Type[T]):
        """
        Initialize repository.

        Args:
            db: Async database session
            model: SQLAlchemy model class
        """
        self.db = db
        self.model = model

    async def get_by_id(self, id: int) -> T | None:
        """
        Get entity by primary key ID.

        Args:
            id: Primary key value

        Returns:
            Entity if found, None otherwise
        """
        return await self.db.get(self.model, id)

    async def get_first(self) -> T | None:
        """Get the first row by primary key (single-row tables)."""
        result = await self.db.execute(
            select(self.model).order_by(self.model.id).limit(1)
        )
        return result.scalar_one_or_none()

    async def get_all(self, **kwargs) -> list[T]:
        """
        Get all entities matching criteria.

        Args:
            **kwargs: Field name-value pairs to filter by

        Returns:
            List of matching entities
        """
        query = select(self.model)
        for key, value in kwargs.items():
            query = query.where(getattr(self.model, key) == value)
        result = await self.db.execute(query.order_by(self.model.id))
        return list(result.scalars().all())

    async def create(self, **kwargs) -> T:
        """
        Create new entity.

        Args:
            **kwargs: Field values for new entity

        Returns:
            Created entity with generated ID
        """
        entity = self.model(**kwargs)
        self.db.add(entity)
        await self.db.flush()
        return entity

    async def add_all(self, entities: list[T]) -> None:
        """Insert entities; duplicate keys raise on flush."""
        self.db.add_all(entities)
        await self.db.flush()

    async def upsert(self, entity: T) -> T:
        """
        Insert or overwrite entity by primary key.

        Last write wins, no field merge.
        """
        merged = await self.db.merge(entity)
        await self.db.flush()
        return merged

    async def update(self, entity: T, **kwargs) -> T:
        """
        Update entity fields.

        Args:
            entity: Entity to update
            **kwargs: Field values to update

        Returns:
            Updated entity
        """
        for key, value in kwargs.items():
            setattr(entity, key, value)
        await self.db.flush()
        return entity

    async def delete_by_id(self, id: int) -> bool:
        """
        Delete entity by primary key.

        Returns:
            True if a row was deleted
        """
        result = await self.db.execute(
            delete(self.model).where(self.model.id == id)
        )
        return (result.rowcount or 0) > 0

    async def clear(self) -> int:
        """
        Delete all rows.

        Returns:
            Number of rows deleted
        """
        result = await self.db.execute(delete(self.model))
        return result.rowcount or 0

    async def count(self, **kwargs) -> int:
        """
        Count entities matching criteria.

        Args:
            **kwargs: Field name-value pairs to filter by

        Returns:
            Number of matching entities
        """
        query = select(func.count()).select_from(self.model)
        for key, value in kwargs.items():
            query = query.where(getattr(self.model, key) == value)
        result = await self.db.execute(query)
        return result.scalar() or 0
