"""
Dashboard API routes.
"""

from fastapi import APIRouter, Depends

from src.api.dependencies import (
    AuthContext,
    CurrentUser,
    DashboardServiceDep,
    require_permissions,
)
from src.core.permissions import PermissionName as P
from src.schemas.common import ApiResponse
from src.schemas.dashboard import DashboardMetrics, RecentTickets
from src.schemas.notification import NotificationResponse
from src.schemas.ticket import TicketListItem

router = APIRouter(prefix="/dashboard", tags=["Dashboard"])

can_view_tickets = require_permissions(P.VIEW_TICKETS, P.VIEW_ALL_TICKETS)


@router.get(
    "/metrics",
    response_model=ApiResponse[DashboardMetrics],
    summary="Ticket counters",
    description="Counts use the same visibility rule as the ticket list.",
)
async def get_metrics(
    dashboard_service: DashboardServiceDep,
    auth: AuthContext = Depends(can_view_tickets),
) -> ApiResponse[DashboardMetrics]:
    return ApiResponse(data=await dashboard_service.get_metrics(auth.user, auth.permissions))


@router.get(
    "/recent-tickets",
    response_model=ApiResponse[RecentTickets],
    summary="Five most recent visible tickets",
)
async def recent_tickets(
    dashboard_service: DashboardServiceDep,
    auth: AuthContext = Depends(can_view_tickets),
) -> ApiResponse[RecentTickets]:
    tickets = await dashboard_service.recent_tickets(auth.user, auth.permissions)
    return ApiResponse(
        data=RecentTickets(items=[TicketListItem.model_validate(t) for t in tickets])
    )


@router.get(
    "/recent-notifications",
    response_model=ApiResponse[list[NotificationResponse]],
    summary="Five newest notifications",
)
async def recent_notifications(
    current_user: CurrentUser,
    dashboard_service: DashboardServiceDep,
) -> ApiResponse[list[NotificationResponse]]:
    notifications = await dashboard_service.recent_notifications(current_user)
    return ApiResponse(data=[NotificationResponse.model_validate(n) for n in notifications])
