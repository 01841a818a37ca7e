"""
Notification API routes.

Callers only ever see and change their own notifications; another user's
notification answers 404.
"""

import logging
import uuid

from fastapi import APIRouter, Depends, Query, status

from src.api.dependencies import (
    AuthContext,
    CurrentUser,
    NotificationServiceDep,
    require_permissions,
)
from src.core.permissions import PermissionName as P
from src.schemas.common import ApiResponse, MessageData
from src.schemas.notification import (
    NotificationCreate,
    NotificationList,
    NotificationResponse,
    ReadAllResult,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/notifications", tags=["Notifications"])


@router.get("", response_model=ApiResponse[NotificationList], summary="My notifications")
async def list_notifications(
    current_user: CurrentUser,
    notification_service: NotificationServiceDep,
    unread_only: bool = Query(False, alias="unreadOnly"),
    limit: int = Query(50, ge=1, le=100),
) -> ApiResponse[NotificationList]:
    notifications, unread = await notification_service.list_for_user(
        current_user.id, unread_only=unread_only, limit=limit
    )
    return ApiResponse(
        data=NotificationList(
            items=[NotificationResponse.model_validate(n) for n in notifications],
            unread_count=unread,
        )
    )


@router.post(
    "",
    response_model=ApiResponse[NotificationResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Send a notification",
)
async def send_notification(
    data: NotificationCreate,
    notification_service: NotificationServiceDep,
    auth: AuthContext = Depends(require_permissions(P.CREATE_TICKETS, P.CREATE_REPORTS)),
) -> ApiResponse[NotificationResponse]:
    """
    Raises:
        400: userId, title or message missing
        404: Recipient does not exist
    """
    notification = await notification_service.send(
        data.user_id, data.title, data.message, data.related_id, data.related_type
    )
    return ApiResponse(data=NotificationResponse.model_validate(notification))


@router.post("/read-all", response_model=ApiResponse[ReadAllResult], summary="Mark all read")
async def mark_all_read(
    current_user: CurrentUser,
    notification_service: NotificationServiceDep,
) -> ApiResponse[ReadAllResult]:
    updated = await notification_service.mark_all_read(current_user.id)
    return ApiResponse(data=ReadAllResult(updated=updated))


@router.patch(
    "/{notification_id}/read",
    response_model=ApiResponse[NotificationResponse],
    summary="Mark one notification read",
)
async def mark_read(
    notification_id: uuid.UUID,
    current_user: CurrentUser,
    notification_service: NotificationServiceDep,
) -> ApiResponse[NotificationResponse]:
    notification = await notification_service.mark_read(current_user.id, notification_id)
    return ApiResponse(data=NotificationResponse.model_validate(notification))


@router.delete(
    "/{notification_id}",
    response_model=ApiResponse[MessageData],
    summary="Delete a notification",
)
async def delete_notification(
    notification_id: uuid.UUID,
    current_user: CurrentUser,
    notification_service: NotificationServiceDep,
) -> ApiResponse[MessageData]:
    await notification_service.delete(current_user.id, notification_id)
    return ApiResponse(data=MessageData(message="Notification deleted"))
