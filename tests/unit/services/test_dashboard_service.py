"""
Unit tests for DashboardService.
"""

from datetime import UTC, datetime
from unittest.mock import AsyncMock, patch

import pytest

from src.core.permissions import PermissionName as P
from src.models.enums import RESOLVED_TICKET_STATUSES, Priority, TicketStatus
from src.services.dashboard_service import DashboardService


@pytest.fixture
def mock_ticket_repo():
    repo = AsyncMock()
    repo.count_tickets.side_effect = [10, 4, 2, 1]
    return repo


@pytest.fixture
def dashboard_service(mock_ticket_repo):
    with patch(
        "src.services.dashboard_service.TicketRepository", return_value=mock_ticket_repo
    ), patch("src.services.dashboard_service.NotificationRepository", return_value=AsyncMock()):
        service = DashboardService(AsyncMock())
    return service


class TestMetrics:
    @pytest.mark.asyncio
    async def test_counters(self, dashboard_service, mock_ticket_repo, regular_user):
        now = datetime(2026, 10, 18, 15, 45, tzinfo=UTC)

        metrics = await dashboard_service.get_metrics(
            regular_user, {P.VIEW_ALL_TICKETS.value}, now=now
        )

        assert (
            metrics.total_tickets,
            metrics.pending_tickets,
            metrics.resolved_today,
            metrics.urgent_tickets,
        ) == (10, 4, 2, 1)
        calls = mock_ticket_repo.count_tickets.call_args_list
        assert all(c.args[0] is None for c in calls)
        assert calls[1].kwargs["statuses"] == [TicketStatus.PENDING]
        assert calls[2].kwargs["statuses"] == RESOLVED_TICKET_STATUSES
        assert calls[2].kwargs["updated_since"] == datetime(2026, 10, 18, tzinfo=UTC)
        assert calls[3].kwargs["priority"] == Priority.URGENT

    @pytest.mark.asyncio
    async def test_scoped_caller_counts_visible_tickets_only(
        self, dashboard_service, mock_ticket_repo, regular_user
    ):
        await dashboard_service.get_metrics(regular_user, {P.VIEW_TICKETS.value})

        calls = mock_ticket_repo.count_tickets.call_args_list
        assert all(c.args[0] is not None for c in calls)
