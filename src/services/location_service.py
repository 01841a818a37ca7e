"""
Location service.
"""

import logging
import uuid

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.db_errors import translate_integrity_error
from src.exceptions import ConflictError, NotFoundError, RequiredFieldError
from src.models.location import LOCATION_NAME_CONSTRAINT, Location
from src.repositories.location_repository import LocationRepository
from src.schemas.reference import LocationUpdate, SortOrderItem

logger = logging.getLogger(__name__)

DUPLICATE_LOCATION_MESSAGE = "A location with this name already exists"


class LocationService:
    """Service class for location operations."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.location_repo = LocationRepository(session)

    async def _get_or_404(self, location_id: uuid.UUID) -> Location:
        location = await self.location_repo.get_by_id(location_id)
        if location is None:
            raise NotFoundError("Location")
        return location

    async def _commit(self) -> None:
        try:
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            raise translate_integrity_error(
                e, {LOCATION_NAME_CONSTRAINT: DUPLICATE_LOCATION_MESSAGE}
            ) from e

    async def list_locations(self, active_only: bool = False) -> list[Location]:
        return await self.location_repo.list_locations(active_only)

    async def create_location(self, name: str | None, is_active: bool = True) -> Location:
        """
        Create a location at the end of the sort order.

        Raises:
            RequiredFieldError: If name is missing
            ConflictError: If the name is taken
        """
        name = (name or "").strip()
        if not name:
            raise RequiredFieldError("name")
        if await self.location_repo.name_taken(name):
            logger.warning(f"Duplicate location name {name!r}")
            raise ConflictError(DUPLICATE_LOCATION_MESSAGE)

        location = Location(
            name=name,
            is_active=is_active,
            sort_order=await self.location_repo.next_sort_order(),
        )
        try:
            location = await self.location_repo.add(location)
        except IntegrityError as e:
            await self.session.rollback()
            raise translate_integrity_error(
                e, {LOCATION_NAME_CONSTRAINT: DUPLICATE_LOCATION_MESSAGE}
            ) from e
        await self._commit()

        logger.info(f"Location {location.id} ({name}) created")
        return location

    async def update_location(self, location_id: uuid.UUID, data: LocationUpdate) -> Location:
        location = await self._get_or_404(location_id)
        changes = data.model_dump(exclude_unset=True)

        if "name" in changes:
            name = (changes["name"] or "").strip()
            if not name:
                raise RequiredFieldError("name")
            if name != location.name and await self.location_repo.name_taken(
                name, exclude_id=location.id
            ):
                raise ConflictError(DUPLICATE_LOCATION_MESSAGE)
            location.name = name
        if changes.get("is_active") is not None:
            location.is_active = changes["is_active"]

        location = await self.location_repo.update(location)
        await self._commit()
        return location

    async def delete_location(self, location_id: uuid.UUID) -> None:
        """
        Raises:
            ConflictError: If reports reference the location
        """
        location = await self._get_or_404(location_id)
        if await self.location_repo.is_referenced_by_reports(location.id):
            raise ConflictError("Location is used by reports")

        await self.location_repo.delete(location)
        await self.session.commit()

        logger.info(f"Location {location_id} deleted")

    async def reorder(self, items: list[SortOrderItem]) -> list[Location]:
        """Apply new sort orders in one transaction; any unknown id aborts all."""
        locations = {
            loc.id: loc
            for loc in await self.location_repo.get_by_ids([item.id for item in items])
        }
        missing = [str(item.id) for item in items if item.id not in locations]
        if missing:
            raise NotFoundError("Location", details={"ids": missing})

        for item in items:
            locations[item.id].sort_order = item.sort_order
        await self.session.commit()
        return sorted(locations.values(), key=lambda loc: loc.sort_order)
