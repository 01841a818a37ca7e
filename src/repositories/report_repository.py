"""
Report repository for report-specific database operations.

This module provides database operations for the Report model and its
links to tickets, including the filtered and sorted list query used by
the report list screen.
"""

import uuid
from datetime import datetime
from typing import Iterable

from sqlalchemy import Select, delete, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.models.enums import Priority, ReportStatus
from src.models.location import Location
from src.models.report import Report, ReportTicket
from src.repositories.base import BaseRepository

# API sort field -> column
REPORT_SORT_COLUMNS = {
    "createdAt": Report.created_at,
    "updatedAt": Report.updated_at,
    "title": Report.title,
    "priority": Report.priority,
    "status": Report.status,
}


class ReportRepository(BaseRepository[Report]):
    """
    Repository for Report model operations.

    Extends BaseRepository with:
    - Filtered, sorted and paginated search
    - Report-ticket link maintenance
    """

    def __init__(self, session: AsyncSession):
        super().__init__(Report, session)

    @staticmethod
    def _apply_filters(
        query: Select,
        statuses: list[ReportStatus] | None = None,
        priorities: list[Priority] | None = None,
        category_ids: Iterable[uuid.UUID] | None = None,
        assignee_id: uuid.UUID | None = None,
        creator_id: uuid.UUID | None = None,
        location_ids: list[uuid.UUID] | None = None,
        search: str | None = None,
        created_from: datetime | None = None,
        created_to: datetime | None = None,
    ) -> Select:
        if statuses:
            query = query.where(Report.status.in_(statuses))
        if priorities:
            query = query.where(Report.priority.in_(priorities))
        if category_ids is not None:
            query = query.where(Report.category_id.in_(list(category_ids)))
        if assignee_id:
            query = query.where(Report.assignee_id == assignee_id)
        if creator_id:
            query = query.where(Report.creator_id == creator_id)
        if location_ids:
            query = query.where(Report.location_id.in_(location_ids))
        if search:
            pattern = f"%{search.strip()}%"
            query = query.outerjoin(Location, Location.id == Report.location_id).where(
                or_(
                    Report.title.ilike(pattern),
                    Report.description.ilike(pattern),
                    Location.name.ilike(pattern),
                )
            )
        if created_from is not None:
            query = query.where(Report.created_at >= created_from)
        if created_to is not None:
            query = query.where(Report.created_at <= created_to)
        return query

    async def search_reports(
        self,
        offset: int = 0,
        limit: int | None = 20,
        sort_field: str = "createdAt",
        sort_order: str = "desc",
        **filters,
    ) -> tuple[list[Report], int]:
        """
        Search reports with filters, sorting and pagination.

        ``category_ids`` must already include descendants; an empty
        collection matches nothing, None disables the filter.
        ``limit=None`` returns every match.

        Returns:
            Tuple of (reports for the page, total matching reports)

        Example:
            reports, total = await report_repo.search_reports(
                statuses=[ReportStatus.UNCONFIRMED],
                search="leak",
                sort_field="priority",
                sort_order="asc",
            )
        """
        count_query = self._apply_filters(select(func.count(Report.id)), **filters)
        total = (await self.session.execute(count_query)).scalar_one()

        order_col = REPORT_SORT_COLUMNS.get(sort_field, Report.created_at)
        query = self._apply_filters(select(Report), **filters)
        query = query.order_by(order_col.asc() if sort_order == "asc" else order_col.desc())
        # Secondary sort keeps pages stable when the primary key ties
        query = query.order_by(Report.id.desc()).offset(offset)
        if limit is not None:
            query = query.limit(limit)

        result = await self.session.execute(query)
        return list(result.scalars().all()), total

    async def get_ticket_ids(self, report_id: str) -> list[str]:
        result = await self.session.execute(
            select(ReportTicket.ticket_id)
            .where(ReportTicket.report_id == report_id)
            .order_by(ReportTicket.ticket_id)
        )
        return list(result.scalars().all())

    async def replace_ticket_links(self, report_id: str, ticket_ids: Iterable[str]) -> None:
        """Replace every ticket link of a report."""
        await self.session.execute(delete(ReportTicket).where(ReportTicket.report_id == report_id))
        self.session.add_all(
            ReportTicket(report_id=report_id, ticket_id=ticket_id)
            for ticket_id in dict.fromkeys(ticket_ids)
        )
        await self.session.flush()

    async def search_public(
        self,
        category_ids: Iterable[uuid.UUID],
        location_ids: list[uuid.UUID] | None = None,
        offset: int = 0,
        limit: int = 10,
        sort_field: str = "createdAt",
        sort_order: str = "desc",
    ) -> tuple[list[Report], int]:
        """
        Reports filed under the public categories, for the anonymous feed.

        ``sort_field`` is one of ``createdAt``, ``id`` or ``location``.
        """
        query = select(Report).where(Report.category_id.in_(list(category_ids)))
        if location_ids:
            query = query.where(Report.location_id.in_(location_ids))

        total = (
            await self.session.execute(select(func.count()).select_from(query.subquery()))
        ).scalar_one()

        if sort_field == "location":
            query = query.outerjoin(Location, Location.id == Report.location_id)
            order_col = Location.name
        elif sort_field == "id":
            order_col = Report.id
        else:
            order_col = Report.created_at
        query = query.order_by(order_col.asc() if sort_order == "asc" else order_col.desc())
        query = query.order_by(Report.id.desc()).offset(offset).limit(limit)

        result = await self.session.execute(query)
        return list(result.scalars().all()), total
