"""
Base repository with generic CRUD operations.

This module provides a generic repository pattern for database operations.
All specific repositories should inherit from BaseRepository.

Type Parameters:
    ModelType: The SQLAlchemy model class (e.g., User, Location, etc.)
"""

import uuid
from datetime import UTC, datetime
from typing import Any, Generic, Sequence, TypeVar

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.models.base import Base

ModelType = TypeVar("ModelType", bound=Base)

# Reports and tickets use sequential string ids, every other model a UUID
PrimaryKey = uuid.UUID | str


class BaseRepository(Generic[ModelType]):
    """
    Generic base repository for database operations.

    Provides common CRUD operations that work with any SQLAlchemy model.
    Automatically handles soft deletes by filtering out deleted records.

    Repositories never commit: the calling service owns the transaction.

    Usage:
        class LocationRepository(BaseRepository[Location]):
            def __init__(self, session: AsyncSession):
                super().__init__(Location, session)
    """

    def __init__(self, model: type[ModelType], session: AsyncSession):
        self.model = model
        self.session = session

    def _apply_soft_delete_filter(self, query: Select[Any]) -> Select[Any]:
        """Exclude soft-deleted rows when the model supports soft delete."""
        if hasattr(self.model, "deleted_at"):
            query = query.where(self.model.deleted_at.is_(None))
        return query

    async def add(self, instance: ModelType) -> ModelType:
        """
        Persist a model instance.

        Returns:
            Persisted model instance (with ID and timestamps populated)
        """
        self.session.add(instance)
        await self.session.flush()
        await self.session.refresh(instance)
        return instance

    async def add_all(self, instances: Sequence[ModelType]) -> list[ModelType]:
        """Persist several instances with a single flush."""
        self.session.add_all(instances)
        await self.session.flush()
        return list(instances)

    async def get_by_id(self, id: PrimaryKey) -> ModelType | None:
        """
        Get a record by primary key, ignoring soft-deleted rows.

        Example:
            location = await location_repo.get_by_id(location_id)
            if location is None:
                raise NotFoundError("Location")
        """
        query = select(self.model).where(self.model.id == id)
        query = self._apply_soft_delete_filter(query)

        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def get_by_ids(self, ids: Sequence[PrimaryKey]) -> list[ModelType]:
        """Fetch several records at once; missing ids are simply absent."""
        if not ids:
            return []
        query = select(self.model).where(self.model.id.in_(ids))
        query = self._apply_soft_delete_filter(query)

        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def get_all(
        self,
        offset: int = 0,
        limit: int = 100,
    ) -> list[ModelType]:
        """Get records with pagination, ignoring soft-deleted rows."""
        query = select(self.model).offset(offset).limit(limit)
        query = self._apply_soft_delete_filter(query)

        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def update(self, instance: ModelType) -> ModelType:
        """
        Persist changes to an already-modified model instance.

        The caller modifies attributes first; this method flushes and
        refreshes so relationships and onupdate timestamps are current.

        Example:
            location.name = "Lobby"
            location = await location_repo.update(location)
        """
        await self.session.flush()
        await self.session.refresh(instance)
        return instance

    async def soft_delete(self, instance: ModelType) -> ModelType:
        """
        Soft delete a record (set deleted_at timestamp).

        Raises:
            AttributeError: If model doesn't support soft delete
        """
        if not hasattr(instance, "deleted_at"):
            raise AttributeError(f"{self.model.__name__} does not support soft delete")

        instance.deleted_at = datetime.now(UTC)

        await self.session.flush()
        return instance

    async def delete(self, instance: ModelType) -> None:
        """Hard delete a record."""
        await self.session.delete(instance)
        await self.session.flush()

    async def count(self) -> int:
        """Count records, ignoring soft-deleted rows."""
        query = select(func.count()).select_from(self.model)
        query = self._apply_soft_delete_filter(query)

        result = await self.session.execute(query)
        return result.scalar_one()

    async def exists(self, id: PrimaryKey) -> bool:
        """Check if a live record exists by primary key."""
        return await self.get_by_id(id) is not None
