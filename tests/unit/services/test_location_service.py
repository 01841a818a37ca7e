"""
Unit tests for LocationService.
"""

import uuid
from unittest.mock import AsyncMock, patch

import pytest

from src.exceptions import ConflictError, NotFoundError, RequiredFieldError
from src.models.location import Location
from src.schemas.reference import LocationUpdate, SortOrderItem
from src.services.location_service import DUPLICATE_LOCATION_MESSAGE, LocationService


@pytest.fixture
def mock_session():
    return AsyncMock()


@pytest.fixture
def mock_location_repo():
    repo = AsyncMock()
    repo.add.side_effect = lambda loc: loc
    repo.update.side_effect = lambda loc: loc
    repo.name_taken.return_value = False
    return repo


@pytest.fixture
def location_service(mock_session, mock_location_repo):
    with patch(
        "src.services.location_service.LocationRepository", return_value=mock_location_repo
    ):
        service = LocationService(mock_session)
    return service


def make_location(name="Basement", sort_order=0, is_active=True):
    return Location(id=uuid.uuid4(), name=name, sort_order=sort_order, is_active=is_active)


class TestLocations:
    @pytest.mark.asyncio
    async def test_create_appends_to_sort_order(self, location_service, mock_location_repo):
        mock_location_repo.next_sort_order.return_value = 7

        location = await location_service.create_location("Roof")

        assert location.sort_order == 7
        assert location.is_active is True

    @pytest.mark.asyncio
    async def test_create_duplicate(self, location_service, mock_location_repo):
        mock_location_repo.name_taken.return_value = True

        with pytest.raises(ConflictError) as exc_info:
            await location_service.create_location("Roof")

        assert exc_info.value.message == DUPLICATE_LOCATION_MESSAGE

    @pytest.mark.asyncio
    async def test_update_toggles_active(self, location_service, mock_location_repo):
        location = make_location()
        mock_location_repo.get_by_id.return_value = location

        await location_service.update_location(location.id, LocationUpdate(is_active=False))

        assert location.is_active is False
        assert location.name == "Basement"

    @pytest.mark.asyncio
    async def test_update_blank_name(self, location_service, mock_location_repo):
        mock_location_repo.get_by_id.return_value = make_location()

        with pytest.raises(RequiredFieldError):
            await location_service.update_location(uuid.uuid4(), LocationUpdate(name=" "))

    @pytest.mark.asyncio
    async def test_delete_in_use(self, location_service, mock_location_repo):
        mock_location_repo.get_by_id.return_value = make_location()
        mock_location_repo.is_referenced_by_reports.return_value = True

        with pytest.raises(ConflictError):
            await location_service.delete_location(uuid.uuid4())

        mock_location_repo.delete.assert_not_called()

    @pytest.mark.asyncio
    async def test_delete_missing(self, location_service, mock_location_repo):
        mock_location_repo.get_by_id.return_value = None

        with pytest.raises(NotFoundError):
            await location_service.delete_location(uuid.uuid4())

    @pytest.mark.asyncio
    async def test_reorder_returns_new_order(self, location_service, mock_location_repo):
        a, b = make_location("A", 0), make_location("B", 1)
        mock_location_repo.get_by_ids.return_value = [a, b]

        result = await location_service.reorder(
            [SortOrderItem(id=a.id, sort_order=1), SortOrderItem(id=b.id, sort_order=0)]
        )

        assert [loc.name for loc in result] == ["B", "A"]
