"""
Role and permission API routes.

Roles are addressed by name. Every mutation is audited by PermissionService.
"""

import logging

from fastapi import APIRouter, Depends, status

from src.api.dependencies import (
    AuthContext,
    ClientMeta,
    PermissionServiceDep,
    require_permissions,
)
from src.core.permissions import PermissionName as P
from src.schemas.common import ApiResponse, MessageData
from src.schemas.role import (
    PermissionResponse,
    RoleCreate,
    RolePermissionsUpdate,
    RoleResponse,
    RoleUpdate,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/roles", tags=["Roles"])
permissions_router = APIRouter(prefix="/permissions", tags=["Roles"])

can_read_roles = require_permissions(P.VIEW_USERS, P.MANAGE_ROLES)
can_change_roles = require_permissions(P.MANAGE_ROLES, P.ASSIGN_PERMISSIONS)


@router.get("", response_model=ApiResponse[list[RoleResponse]], summary="List roles")
async def list_roles(
    permission_service: PermissionServiceDep,
    auth: AuthContext = Depends(can_read_roles),
) -> ApiResponse[list[RoleResponse]]:
    roles = await permission_service.list_roles()
    return ApiResponse(data=[RoleResponse.from_role(role) for role in roles])


@router.post(
    "",
    response_model=ApiResponse[RoleResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Create a role",
)
async def create_role(
    data: RoleCreate,
    permission_service: PermissionServiceDep,
    meta: ClientMeta,
    auth: AuthContext = Depends(can_change_roles),
) -> ApiResponse[RoleResponse]:
    """
    Raises:
        409: Role name already exists
        400: Unknown permission name
    """
    role = await permission_service.create_role(
        data.name,
        description=data.description,
        permissions=data.permissions,
        actor_id=auth.user.id,
        **meta.as_kwargs(),
    )
    return ApiResponse(data=RoleResponse.from_role(role))


@router.get("/{role_name}", response_model=ApiResponse[RoleResponse], summary="Get a role")
async def get_role(
    role_name: str,
    permission_service: PermissionServiceDep,
    auth: AuthContext = Depends(can_read_roles),
) -> ApiResponse[RoleResponse]:
    role = await permission_service.get_role(role_name.upper())
    return ApiResponse(data=RoleResponse.from_role(role))


@router.put("/{role_name}", response_model=ApiResponse[RoleResponse], summary="Update a role")
async def update_role(
    role_name: str,
    data: RoleUpdate,
    permission_service: PermissionServiceDep,
    meta: ClientMeta,
    auth: AuthContext = Depends(can_change_roles),
) -> ApiResponse[RoleResponse]:
    role = await permission_service.update_role(
        role_name.upper(),
        description=data.description,
        permissions=data.permissions,
        actor_id=auth.user.id,
        **meta.as_kwargs(),
    )
    return ApiResponse(data=RoleResponse.from_role(role))


@router.delete(
    "/{role_name}",
    response_model=ApiResponse[MessageData],
    summary="Delete a role",
    description="Refused with 409 while any user holds the role.",
)
async def delete_role(
    role_name: str,
    permission_service: PermissionServiceDep,
    meta: ClientMeta,
    auth: AuthContext = Depends(can_change_roles),
) -> ApiResponse[MessageData]:
    await permission_service.delete_role(
        role_name.upper(), actor_id=auth.user.id, **meta.as_kwargs()
    )
    return ApiResponse(data=MessageData(message=f"Role {role_name.upper()} deleted"))


@router.put(
    "/{role_name}/permissions",
    response_model=ApiResponse[RoleResponse],
    summary="Replace a role's permissions",
)
async def set_role_permissions(
    role_name: str,
    data: RolePermissionsUpdate,
    permission_service: PermissionServiceDep,
    meta: ClientMeta,
    auth: AuthContext = Depends(can_change_roles),
) -> ApiResponse[RoleResponse]:
    """The whole set is replaced; an unknown name rejects the request unchanged."""
    await permission_service.set_permissions_for_role(
        role_name.upper(), data.permissions, actor_id=auth.user.id, **meta.as_kwargs()
    )
    role = await permission_service.get_role(role_name.upper())
    return ApiResponse(data=RoleResponse.from_role(role))


@router.post(
    "/{role_name}/reset",
    response_model=ApiResponse[RoleResponse],
    summary="Reset a role to its default permissions",
)
async def reset_role(
    role_name: str,
    permission_service: PermissionServiceDep,
    meta: ClientMeta,
    auth: AuthContext = Depends(can_change_roles),
) -> ApiResponse[RoleResponse]:
    await permission_service.reset_role_to_default(
        role_name.upper(), actor_id=auth.user.id, **meta.as_kwargs()
    )
    role = await permission_service.get_role(role_name.upper())
    return ApiResponse(data=RoleResponse.from_role(role))


@permissions_router.get(
    "",
    response_model=ApiResponse[list[PermissionResponse]],
    summary="Permission catalog",
)
async def list_permissions(
    permission_service: PermissionServiceDep,
    auth: AuthContext = Depends(can_read_roles),
) -> ApiResponse[list[PermissionResponse]]:
    permissions = await permission_service.list_permissions()
    return ApiResponse(data=[PermissionResponse.model_validate(p) for p in permissions])
