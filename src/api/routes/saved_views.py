"""
Saved view API routes.

Views are private to their owner. Filters are reconciled to the canonical
key set on every write, and at most one view per type is the default.
"""

import logging
import uuid

from fastapi import APIRouter, Query, status

from src.api.dependencies import CurrentUser, SavedViewServiceDep
from src.models.enums import SavedViewType
from src.schemas.common import ApiResponse, MessageData
from src.schemas.saved_view import SavedViewCreate, SavedViewResponse, SavedViewUpdate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/saved-views", tags=["Saved Views"])


@router.get("", response_model=ApiResponse[list[SavedViewResponse]], summary="My saved views")
async def list_views(
    current_user: CurrentUser,
    saved_view_service: SavedViewServiceDep,
    view_type: SavedViewType | None = Query(None, alias="viewType"),
) -> ApiResponse[list[SavedViewResponse]]:
    views = await saved_view_service.list_views(current_user, view_type)
    return ApiResponse(data=[SavedViewResponse.model_validate(v) for v in views])


@router.post(
    "",
    response_model=ApiResponse[SavedViewResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Save a view",
)
async def create_view(
    data: SavedViewCreate,
    current_user: CurrentUser,
    saved_view_service: SavedViewServiceDep,
) -> ApiResponse[SavedViewResponse]:
    """
    Raises:
        400: Name or filters missing
        409: Name already used for this view type
    """
    view = await saved_view_service.create_view(
        current_user, data.name, data.view_type, data.filters, data.is_default
    )
    return ApiResponse(data=SavedViewResponse.model_validate(view))


@router.get("/{view_id}", response_model=ApiResponse[SavedViewResponse], summary="Get a view")
async def get_view(
    view_id: uuid.UUID,
    current_user: CurrentUser,
    saved_view_service: SavedViewServiceDep,
) -> ApiResponse[SavedViewResponse]:
    view = await saved_view_service.get_view(current_user, view_id)
    return ApiResponse(data=SavedViewResponse.model_validate(view))


@router.put("/{view_id}", response_model=ApiResponse[SavedViewResponse], summary="Update a view")
async def update_view(
    view_id: uuid.UUID,
    data: SavedViewUpdate,
    current_user: CurrentUser,
    saved_view_service: SavedViewServiceDep,
) -> ApiResponse[SavedViewResponse]:
    view = await saved_view_service.update_view(
        current_user, view_id, name=data.name, filters=data.filters, is_default=data.is_default
    )
    return ApiResponse(data=SavedViewResponse.model_validate(view))


@router.delete("/{view_id}", response_model=ApiResponse[MessageData], summary="Delete a view")
async def delete_view(
    view_id: uuid.UUID,
    current_user: CurrentUser,
    saved_view_service: SavedViewServiceDep,
) -> ApiResponse[MessageData]:
    await saved_view_service.delete_view(current_user, view_id)
    return ApiResponse(data=MessageData(message="View deleted"))


@router.post(
    "/{view_id}/set-default",
    response_model=ApiResponse[SavedViewResponse],
    summary="Make a view the default of its type",
)
async def set_default(
    view_id: uuid.UUID,
    current_user: CurrentUser,
    saved_view_service: SavedViewServiceDep,
) -> ApiResponse[SavedViewResponse]:
    view = await saved_view_service.set_default(current_user, view_id)
    return ApiResponse(data=SavedViewResponse.model_validate(view))
