"""
Audit log schemas.
"""

import uuid
from datetime import datetime
from typing import Any

from src.models.audit_log import AuditAction, AuditStatus
from src.schemas.common import CamelModel


class AuditLogResponse(CamelModel):
    """Audit entry as returned by the audit log listing."""

    id: uuid.UUID
    user_id: uuid.UUID | None = None
    action: AuditAction
    entity_type: str
    entity_id: str | None = None
    old_values: dict[str, Any] | None = None
    new_values: dict[str, Any] | None = None
    description: str | None = None
    ip_address: str | None = None
    request_id: str | None = None
    status: AuditStatus
    error_message: str | None = None
    created_at: datetime
