"""
Dashboard service: ticket counters and recent items for the home screen.

All ticket figures use the same visibility rule as the ticket list.
"""

from datetime import UTC, datetime

from sqlalchemy.ext.asyncio import AsyncSession

from src.models.enums import RESOLVED_TICKET_STATUSES, Priority, TicketStatus
from src.models.notification import Notification
from src.models.ticket import Ticket
from src.models.user import User
from src.repositories.notification_repository import NotificationRepository
from src.repositories.ticket_repository import TicketRepository
from src.schemas.dashboard import DashboardMetrics
from src.services.ticket_service import visibility_for


class DashboardService:
    def __init__(self, session: AsyncSession):
        self.session = session
        self.ticket_repo = TicketRepository(session)
        self.notification_repo = NotificationRepository(session)

    async def get_metrics(
        self, current_user: User, permissions: set[str], now: datetime | None = None
    ) -> DashboardMetrics:
        """
        Ticket counters for the caller.

        ``resolved_today`` counts COMPLETED or VERIFIED tickets last updated
        since midnight UTC.
        """
        visibility = visibility_for(current_user, permissions)
        today = (now or datetime.now(UTC)).replace(hour=0, minute=0, second=0, microsecond=0)

        return DashboardMetrics(
            total_tickets=await self.ticket_repo.count_tickets(visibility),
            pending_tickets=await self.ticket_repo.count_tickets(
                visibility, statuses=[TicketStatus.PENDING]
            ),
            resolved_today=await self.ticket_repo.count_tickets(
                visibility, statuses=RESOLVED_TICKET_STATUSES, updated_since=today
            ),
            urgent_tickets=await self.ticket_repo.count_tickets(
                visibility, priority=Priority.URGENT
            ),
        )

    async def recent_tickets(
        self, current_user: User, permissions: set[str], limit: int = 5
    ) -> list[Ticket]:
        return await self.ticket_repo.recent(visibility_for(current_user, permissions), limit)

    async def recent_notifications(self, current_user: User, limit: int = 5) -> list[Notification]:
        return await self.notification_repo.list_for_user(current_user.id, limit=limit)
