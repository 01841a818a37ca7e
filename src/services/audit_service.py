"""
Audit service for the administrative audit trail.

This module provides:
- Audit log creation for authentication events
- Audit log creation for user, role and permission changes
- Audit log retrieval for administrators
"""

import logging
import uuid
from datetime import datetime
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from src.core.config import settings
from src.models.audit_log import AuditAction, AuditLog, AuditStatus
from src.repositories.audit_repository import AuditLogRepository

logger = logging.getLogger(__name__)


class AuditService:
    """
    Service class for audit logging operations.

    Audit rows are added to the caller's session and flushed, never
    committed here: the service that performs the audited change commits
    both together, so a rolled-back change leaves no audit row behind.
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self.audit_repo = AuditLogRepository(session)

    async def log_event(
        self,
        user_id: uuid.UUID | None,
        action: AuditAction,
        entity_type: str,
        entity_id: uuid.UUID | str | None = None,
        old_values: dict[str, Any] | None = None,
        new_values: dict[str, Any] | None = None,
        description: str | None = None,
        ip_address: str | None = None,
        user_agent: str | None = None,
        request_id: str | None = None,
        status: AuditStatus = AuditStatus.SUCCESS,
        error_message: str | None = None,
    ) -> AuditLog | None:
        """
        Log a generic audit event.

        Returns None without writing when auditing is disabled.

        Example:
            await audit_service.log_event(
                user_id=admin.id,
                action=AuditAction.PERMISSION_GRANT,
                entity_type="role",
                entity_id=role.id,
                new_values={"granted": ["view_reports"]},
                request_id=request_id,
            )
        """
        if not settings.audit_log_enabled:
            return None

        audit_log = AuditLog(
            user_id=user_id,
            action=action,
            entity_type=entity_type,
            entity_id=str(entity_id) if entity_id is not None else None,
            old_values=old_values,
            new_values=new_values,
            description=description,
            ip_address=ip_address,
            user_agent=user_agent,
            request_id=request_id,
            status=status,
            error_message=error_message,
        )
        audit_log = await self.audit_repo.add(audit_log)

        logger.debug(
            f"Audit log created: user={user_id}, action={action.value}, "
            f"entity={entity_type}:{entity_id}, status={status.value}"
        )

        return audit_log

    async def log_login(
        self,
        user_id: uuid.UUID | None,
        ip_address: str | None = None,
        user_agent: str | None = None,
        request_id: str | None = None,
        success: bool = True,
        error_message: str | None = None,
    ) -> AuditLog | None:
        """Log a login attempt; failures are recorded with status FAILURE."""
        return await self.log_event(
            user_id=user_id,
            action=AuditAction.LOGIN if success else AuditAction.LOGIN_FAILED,
            entity_type="user",
            entity_id=user_id,
            description="User logged in successfully" if success else "Login attempt failed",
            ip_address=ip_address,
            user_agent=user_agent,
            request_id=request_id,
            status=AuditStatus.SUCCESS if success else AuditStatus.FAILURE,
            error_message=error_message,
        )

    async def log_password_change(
        self,
        user_id: uuid.UUID,
        ip_address: str | None = None,
        user_agent: str | None = None,
        request_id: str | None = None,
        success: bool = True,
        error_message: str | None = None,
    ) -> AuditLog | None:
        return await self.log_event(
            user_id=user_id,
            action=AuditAction.PASSWORD_CHANGE,
            entity_type="user",
            entity_id=user_id,
            description=(
                "User password changed successfully"
                if success
                else "Password change attempt failed"
            ),
            ip_address=ip_address,
            user_agent=user_agent,
            request_id=request_id,
            status=AuditStatus.SUCCESS if success else AuditStatus.FAILURE,
            error_message=error_message,
        )

    async def get_audit_logs(
        self,
        user_id: uuid.UUID | None = None,
        action: AuditAction | None = None,
        entity_type: str | None = None,
        entity_id: str | None = None,
        status: AuditStatus | None = None,
        start_date: datetime | None = None,
        end_date: datetime | None = None,
        offset: int = 0,
        limit: int = 100,
    ) -> tuple[list[AuditLog], int]:
        """
        Get audit logs with filtering (administrators only).

        Returns:
            Tuple of (list of AuditLog instances, total count)
        """
        return await self.audit_repo.list_logs(
            offset=offset,
            limit=limit,
            user_id=user_id,
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
            status=status,
            start_date=start_date,
            end_date=end_date,
        )
