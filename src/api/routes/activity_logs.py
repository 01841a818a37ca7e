"""
Activity log API routes.
"""

from fastapi import APIRouter, Depends, Query

from src.api.dependencies import ActivityLogServiceDep, AuthContext, require_permissions
from src.core.permissions import PermissionName as P
from src.models.enums import ParentType
from src.schemas.comment import ActivityLogResponse
from src.schemas.common import ApiResponse

router = APIRouter(prefix="/activity-logs", tags=["Activity Logs"])


@router.get(
    "",
    response_model=ApiResponse[list[ActivityLogResponse]],
    summary="History of a report or ticket",
    description="Entries of one report or ticket, oldest first.",
)
async def list_activity_logs(
    activity_service: ActivityLogServiceDep,
    parent_id: str = Query(..., alias="parentId"),
    parent_type: ParentType = Query(..., alias="parentType"),
    auth: AuthContext = Depends(
        require_permissions(
            P.VIEW_REPORTS, P.VIEW_ALL_REPORTS, P.VIEW_TICKETS, P.VIEW_ALL_TICKETS
        )
    ),
) -> ApiResponse[list[ActivityLogResponse]]:
    entries = await activity_service.list_for_parent(parent_type, parent_id)
    return ApiResponse(data=[ActivityLogResponse.model_validate(e) for e in entries])
