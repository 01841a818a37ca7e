"""
User management API routes.

This module provides:
- GET /api/users - List users (search, paginated)
- POST /api/users - Create a user with roles
- POST /api/users/change-password - Change the caller's password
- GET/PUT/DELETE /api/users/{user_id} - Read, update, soft delete
- GET/PUT /api/users/{user_id}/roles - Read and replace the role set
"""

import logging
import uuid

from fastapi import APIRouter, Depends, Query, Request, status

from src.api.dependencies import (
    AuthContext,
    AuthServiceDep,
    ClientMeta,
    CurrentUser,
    Pagination,
    UserServiceDep,
    require_permissions,
)
from src.core.config import settings
from src.core.permissions import PermissionName as P
from src.core.rate_limit import limiter
from src.schemas.common import ApiResponse, MessageData, PaginatedResponse, PaginationMeta
from src.schemas.user import (
    UserCreate,
    UserPasswordChange,
    UserResponse,
    UserRolesResponse,
    UserRolesUpdate,
    UserUpdate,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["Users"])


@router.get(
    "",
    response_model=PaginatedResponse[UserResponse],
    summary="List users",
    description="List live users, newest first. `search` matches email or name.",
)
async def list_users(
    user_service: UserServiceDep,
    pagination: Pagination,
    search: str | None = Query(None, description="Match email or name"),
    auth: AuthContext = Depends(require_permissions(P.VIEW_USERS)),
) -> PaginatedResponse[UserResponse]:
    users, total = await user_service.list_users(pagination, search=search)
    return PaginatedResponse(
        data=[UserResponse.from_user(user) for user in users],
        meta=PaginationMeta.build(total, pagination),
    )


@router.post(
    "",
    response_model=ApiResponse[UserResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Create a user",
)
async def create_user(
    data: UserCreate,
    user_service: UserServiceDep,
    meta: ClientMeta,
    auth: AuthContext = Depends(require_permissions(P.CREATE_USERS)),
) -> ApiResponse[UserResponse]:
    """
    Raises:
        409: Email already in use
        400: Weak password or unknown role
    """
    user = await user_service.create_user(data, auth.user, **meta.as_kwargs())
    return ApiResponse(data=UserResponse.from_user(user))


@router.post(
    "/change-password",
    response_model=ApiResponse[MessageData],
    summary="Change password",
    description="""
    Change the caller's password. The current password must be supplied.

    **Rate Limit:** Configurable via RATE_LIMIT_PASSWORD_CHANGE (default: 3/hour)
    """,
)
@limiter.limit(settings.rate_limit_password_change)
async def change_password(
    request: Request,
    data: UserPasswordChange,
    current_user: CurrentUser,
    auth_service: AuthServiceDep,
    meta: ClientMeta,
) -> ApiResponse[MessageData]:
    await auth_service.change_password(
        current_user,
        current_password=data.current_password,
        new_password=data.new_password,
        **meta.as_kwargs(),
    )
    return ApiResponse(data=MessageData(message="Password changed successfully"))


@router.get("/{user_id}", response_model=ApiResponse[UserResponse], summary="Get a user")
async def get_user(
    user_id: uuid.UUID,
    user_service: UserServiceDep,
    auth: AuthContext = Depends(require_permissions(P.VIEW_USERS)),
) -> ApiResponse[UserResponse]:
    user = await user_service.get_user(user_id)
    return ApiResponse(data=UserResponse.from_user(user))


@router.put("/{user_id}", response_model=ApiResponse[UserResponse], summary="Update a user")
async def update_user(
    user_id: uuid.UUID,
    data: UserUpdate,
    user_service: UserServiceDep,
    meta: ClientMeta,
    auth: AuthContext = Depends(require_permissions(P.EDIT_USERS)),
) -> ApiResponse[UserResponse]:
    user = await user_service.update_user(user_id, data, auth.user, **meta.as_kwargs())
    return ApiResponse(data=UserResponse.from_user(user))


@router.delete(
    "/{user_id}",
    response_model=ApiResponse[MessageData],
    summary="Delete a user",
    description="Soft delete. The email is suffixed so the address can be registered again.",
)
async def delete_user(
    user_id: uuid.UUID,
    user_service: UserServiceDep,
    meta: ClientMeta,
    auth: AuthContext = Depends(require_permissions(P.DELETE_USERS)),
) -> ApiResponse[MessageData]:
    await user_service.delete_user(user_id, auth.user, **meta.as_kwargs())
    return ApiResponse(data=MessageData(message="User deleted"))


@router.get(
    "/{user_id}/roles",
    response_model=ApiResponse[UserRolesResponse],
    summary="Get a user's roles",
)
async def get_user_roles(
    user_id: uuid.UUID,
    user_service: UserServiceDep,
    auth: AuthContext = Depends(require_permissions(P.MANAGE_ROLES)),
) -> ApiResponse[UserRolesResponse]:
    return ApiResponse(data=await user_service.get_user_roles(user_id))


@router.put(
    "/{user_id}/roles",
    response_model=ApiResponse[UserRolesResponse],
    summary="Replace a user's roles",
)
async def set_user_roles(
    user_id: uuid.UUID,
    data: UserRolesUpdate,
    user_service: UserServiceDep,
    meta: ClientMeta,
    auth: AuthContext = Depends(require_permissions(P.MANAGE_ROLES)),
) -> ApiResponse[UserRolesResponse]:
    roles = await user_service.set_user_roles(
        user_id, data.role, data.additional_roles, auth.user, **meta.as_kwargs()
    )
    return ApiResponse(data=roles)
