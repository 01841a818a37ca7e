"""
Category API routes.

Categories form a tree at most three levels deep.
"""

import logging
import uuid

from fastapi import APIRouter, Depends, status

from src.api.dependencies import (
    AuthContext,
    CategoryServiceDep,
    CurrentUser,
    require_permissions,
)
from src.core.permissions import PermissionName as P
from src.schemas.common import ApiResponse, MessageData
from src.schemas.reference import (
    CategoryCreate,
    CategoryResponse,
    CategoryTreeNode,
    CategoryUpdate,
    SortOrderItem,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/categories", tags=["Categories"])

can_manage = require_permissions(P.MANAGE_CATEGORIES)


@router.get(
    "",
    response_model=ApiResponse[list[CategoryTreeNode]],
    summary="Category tree",
    description="Top-level categories with their children nested, ordered by sortOrder.",
)
async def get_tree(
    current_user: CurrentUser,
    category_service: CategoryServiceDep,
) -> ApiResponse[list[CategoryTreeNode]]:
    return ApiResponse(data=await category_service.get_tree())


@router.post(
    "",
    response_model=ApiResponse[CategoryResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Create a category",
)
async def create_category(
    data: CategoryCreate,
    category_service: CategoryServiceDep,
    auth: AuthContext = Depends(can_manage),
) -> ApiResponse[CategoryResponse]:
    """
    Raises:
        400: Missing name, or the new node would be deeper than level 3
        409: A sibling already has this name
    """
    category = await category_service.create_category(data.name, data.parent_id)
    return ApiResponse(data=CategoryResponse.model_validate(category))


@router.post(
    "/reorder",
    response_model=ApiResponse[list[CategoryResponse]],
    summary="Reorder categories",
)
async def reorder_categories(
    items: list[SortOrderItem],
    category_service: CategoryServiceDep,
    auth: AuthContext = Depends(can_manage),
) -> ApiResponse[list[CategoryResponse]]:
    categories = await category_service.reorder(items)
    return ApiResponse(data=[CategoryResponse.model_validate(c) for c in categories])


@router.put(
    "/{category_id}",
    response_model=ApiResponse[CategoryResponse],
    summary="Rename a category",
)
async def rename_category(
    category_id: uuid.UUID,
    data: CategoryUpdate,
    category_service: CategoryServiceDep,
    auth: AuthContext = Depends(can_manage),
) -> ApiResponse[CategoryResponse]:
    category = await category_service.rename_category(category_id, data.name)
    return ApiResponse(data=CategoryResponse.model_validate(category))


@router.delete(
    "/{category_id}",
    response_model=ApiResponse[MessageData],
    summary="Delete a category",
    description="Refused with 409 while it has subcategories or reports use it.",
)
async def delete_category(
    category_id: uuid.UUID,
    category_service: CategoryServiceDep,
    auth: AuthContext = Depends(can_manage),
) -> ApiResponse[MessageData]:
    await category_service.delete_category(category_id)
    return ApiResponse(data=MessageData(message="Category deleted"))
