"""
Location repository.
"""

import uuid

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.models.location import Location
from src.models.report import Report
from src.repositories.base import BaseRepository


class LocationRepository(BaseRepository[Location]):
    """Repository for Location model operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(Location, session)

    async def list_locations(self, active_only: bool = False) -> list[Location]:
        """Locations ordered by sort_order, optionally only active ones."""
        query = select(Location)
        if active_only:
            query = query.where(Location.is_active.is_(True))
        query = query.order_by(Location.sort_order, Location.name)

        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def name_taken(self, name: str, exclude_id: uuid.UUID | None = None) -> bool:
        query = select(Location.id).where(func.lower(Location.name) == name.strip().lower())
        if exclude_id is not None:
            query = query.where(Location.id != exclude_id)

        result = await self.session.execute(query.limit(1))
        return result.first() is not None

    async def next_sort_order(self) -> int:
        """max(sort_order) + 1, or 0 for the first location."""
        result = await self.session.execute(
            select(func.coalesce(func.max(Location.sort_order), -1))
        )
        return result.scalar_one() + 1

    async def is_referenced_by_reports(self, location_id: uuid.UUID) -> bool:
        result = await self.session.execute(
            select(Report.id).where(Report.location_id == location_id).limit(1)
        )
        return result.first() is not None
