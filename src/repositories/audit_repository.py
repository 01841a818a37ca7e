"""
AuditLog repository for audit trail operations.

Note: AuditLogs are IMMUTABLE - this repository only supports
creation and reading, not updates or deletes.
"""

import uuid
from datetime import datetime

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.models.audit_log import AuditAction, AuditLog, AuditStatus


class AuditLogRepository:
    """
    Repository for AuditLog model operations.

    Does NOT extend BaseRepository because audit logs are immutable.
    Only add() and read operations are supported.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def add(self, instance: AuditLog) -> AuditLog:
        """
        Persist a new audit log entry.

        The entry joins the caller's transaction; it is committed together
        with the change it describes.
        """
        self.session.add(instance)
        await self.session.flush()
        return instance

    @staticmethod
    def _filtered(
        query: Select,
        user_id: uuid.UUID | None = None,
        action: AuditAction | None = None,
        entity_type: str | None = None,
        entity_id: str | None = None,
        status: AuditStatus | None = None,
        start_date: datetime | None = None,
        end_date: datetime | None = None,
    ) -> Select:
        if user_id:
            query = query.where(AuditLog.user_id == user_id)
        if action:
            query = query.where(AuditLog.action == action)
        if entity_type:
            query = query.where(AuditLog.entity_type == entity_type)
        if entity_id:
            query = query.where(AuditLog.entity_id == entity_id)
        if status:
            query = query.where(AuditLog.status == status)
        if start_date:
            query = query.where(AuditLog.created_at >= start_date)
        if end_date:
            query = query.where(AuditLog.created_at <= end_date)
        return query

    async def list_logs(
        self,
        offset: int = 0,
        limit: int = 100,
        **filters,
    ) -> tuple[list[AuditLog], int]:
        """
        Filtered audit logs, newest first, with the total count.

        Example:
            # Failed logins of the last week
            logs, total = await audit_repo.list_logs(
                action=AuditAction.LOGIN_FAILED,
                start_date=datetime.now(UTC) - timedelta(days=7),
            )
        """
        count_query = self._filtered(select(func.count()).select_from(AuditLog), **filters)
        total = (await self.session.execute(count_query)).scalar_one()

        query = self._filtered(select(AuditLog), **filters)
        query = query.order_by(AuditLog.created_at.desc()).offset(offset).limit(limit)
        result = await self.session.execute(query)

        return list(result.scalars().all()), total
