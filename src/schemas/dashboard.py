"""Dashboard schemas."""

from src.schemas.common import CamelModel
from src.schemas.ticket import TicketListItem


class DashboardMetrics(CamelModel):
    total_tickets: int
    pending_tickets: int
    resolved_today: int
    urgent_tickets: int


class RecentTickets(CamelModel):
    items: list[TicketListItem]
