"""
Health Check Endpoints
"""

import logging
from typing import Any

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.config import settings
from src.core.database import check_database_connection, get_db

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/health", tags=["Health"])


@router.get("")
async def health_check(db: AsyncSession = Depends(get_db)) -> JSONResponse:
    """
    Liveness plus a database round trip.

    Answers 503 when the database does not respond to ``SELECT 1``.
    """
    db_healthy = await check_database_connection(db)
    body: dict[str, Any] = {
        "status": "healthy" if db_healthy else "degraded",
        "app": settings.app_name,
        "version": settings.version,
        "environment": settings.environment,
        "checks": {"database": "ok" if db_healthy else "ko"},
    }
    return JSONResponse(status_code=200 if db_healthy else 503, content=body)
