"""
Location API routes.
"""

import logging
import uuid

from fastapi import APIRouter, Depends, Query, status

from src.api.dependencies import (
    AuthContext,
    CurrentUser,
    LocationServiceDep,
    require_permissions,
)
from src.core.permissions import PermissionName as P
from src.schemas.common import ApiResponse, MessageData
from src.schemas.reference import (
    LocationCreate,
    LocationResponse,
    LocationUpdate,
    SortOrderItem,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/locations", tags=["Locations"])

can_manage = require_permissions(P.MANAGE_LOCATIONS)


@router.get("", response_model=ApiResponse[list[LocationResponse]], summary="List locations")
async def list_locations(
    current_user: CurrentUser,
    location_service: LocationServiceDep,
    active: bool = Query(False, description="Only active locations"),
) -> ApiResponse[list[LocationResponse]]:
    locations = await location_service.list_locations(active_only=active)
    return ApiResponse(data=[LocationResponse.model_validate(loc) for loc in locations])


@router.post(
    "",
    response_model=ApiResponse[LocationResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Create a location",
)
async def create_location(
    data: LocationCreate,
    location_service: LocationServiceDep,
    auth: AuthContext = Depends(can_manage),
) -> ApiResponse[LocationResponse]:
    location = await location_service.create_location(data.name, data.is_active)
    return ApiResponse(data=LocationResponse.model_validate(location))


@router.post(
    "/reorder",
    response_model=ApiResponse[list[LocationResponse]],
    summary="Reorder locations",
)
async def reorder_locations(
    items: list[SortOrderItem],
    location_service: LocationServiceDep,
    auth: AuthContext = Depends(can_manage),
) -> ApiResponse[list[LocationResponse]]:
    locations = await location_service.reorder(items)
    return ApiResponse(data=[LocationResponse.model_validate(loc) for loc in locations])


@router.put(
    "/{location_id}",
    response_model=ApiResponse[LocationResponse],
    summary="Update a location",
)
async def update_location(
    location_id: uuid.UUID,
    data: LocationUpdate,
    location_service: LocationServiceDep,
    auth: AuthContext = Depends(can_manage),
) -> ApiResponse[LocationResponse]:
    location = await location_service.update_location(location_id, data)
    return ApiResponse(data=LocationResponse.model_validate(location))


@router.delete(
    "/{location_id}",
    response_model=ApiResponse[MessageData],
    summary="Delete a location",
    description="Refused with 409 while reports use it.",
)
async def delete_location(
    location_id: uuid.UUID,
    location_service: LocationServiceDep,
    auth: AuthContext = Depends(can_manage),
) -> ApiResponse[MessageData]:
    await location_service.delete_location(location_id)
    return ApiResponse(data=MessageData(message="Location deleted"))
