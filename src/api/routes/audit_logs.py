"""
Audit log API routes.

This module provides:
- GET /api/audit-logs - Search the audit trail (role administrators)
"""

import logging
import uuid
from datetime import datetime

from fastapi import APIRouter, Depends, Query

from src.api.dependencies import (
    AuditServiceDep,
    AuthContext,
    Pagination,
    require_permissions,
)
from src.core.permissions import PermissionName as P
from src.models.audit_log import AuditAction, AuditStatus
from src.schemas.common import PaginatedResponse, PaginationMeta
from src.schemas.audit import AuditLogResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/audit-logs", tags=["Audit Logs"])


@router.get(
    "",
    response_model=PaginatedResponse[AuditLogResponse],
    summary="Search audit logs",
    description="Audit entries newest first, filtered by actor, action, entity, status and date.",
)
async def list_audit_logs(
    audit_service: AuditServiceDep,
    pagination: Pagination,
    user_id: uuid.UUID | None = Query(None, alias="userId"),
    action: AuditAction | None = Query(None),
    entity_type: str | None = Query(None, alias="entityType"),
    entity_id: str | None = Query(None, alias="entityId"),
    status: AuditStatus | None = Query(None),
    start_date: datetime | None = Query(None, alias="startDate"),
    end_date: datetime | None = Query(None, alias="endDate"),
    auth: AuthContext = Depends(require_permissions(P.MANAGE_ROLES)),
) -> PaginatedResponse[AuditLogResponse]:
    logs, total = await audit_service.get_audit_logs(
        user_id=user_id,
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        status=status,
        start_date=start_date,
        end_date=end_date,
        offset=pagination.offset,
        limit=pagination.page_size,
    )
    return PaginatedResponse(
        data=[AuditLogResponse.model_validate(log) for log in logs],
        meta=PaginationMeta.build(total, pagination),
    )
