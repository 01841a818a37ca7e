"""
FastAPI application entry point.

This module sets up:
- FastAPI application with middleware
- Exception handlers
- Rate limiting with Redis
- API routes
- CORS configuration
"""

import logging

from fastapi import APIRouter, FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.api.routes import (
    activity_logs,
    audit_logs,
    auth,
    categories,
    dashboard,
    health,
    locations,
    notifications,
    public,
    reports,
    roles,
    saved_views,
    tickets,
    users,
)
from src.core import settings
from src.core.handlers import (
    app_exception_handler,
    general_exception_handler,
    http_exception_handler,
    rate_limit_handler,
    validation_exception_handler,
)
from src.core.lifespan import lifespan
from src.core.logging import setup_logging
from src.core.rate_limit import limiter
from src.exceptions import AppException
from src.middleware import (
    RequestIDMiddleware,
    RequestLoggingMiddleware,
    SecurityHeadersMiddleware,
)

# Setup logging
setup_logging()
logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.app_name,
        version=settings.version,
        description=settings.description,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    # Attach rate limiter to app
    app.state.limiter = limiter

    # ========================================================================
    # Exception Handlers
    # ========================================================================
    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RateLimitExceeded, rate_limit_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    # ========================================================================
    # Middleware Setup (last added runs first)
    # ========================================================================
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(SecurityHeadersMiddleware, enable_hsts=settings.is_production)
    app.add_middleware(RequestLoggingMiddleware)
    # Outermost, so request_id is set before anything logs
    app.add_middleware(RequestIDMiddleware)

    # ========================================================================
    # API Routes
    # ========================================================================
    api_router = APIRouter(prefix="/api")
    api_router.include_router(auth.router)
    api_router.include_router(users.router)
    api_router.include_router(roles.router)
    api_router.include_router(roles.permissions_router)
    api_router.include_router(reports.router)
    api_router.include_router(tickets.router)
    api_router.include_router(categories.router)
    api_router.include_router(locations.router)
    api_router.include_router(notifications.router)
    api_router.include_router(saved_views.router)
    api_router.include_router(dashboard.router)
    api_router.include_router(activity_logs.router)
    api_router.include_router(audit_logs.router)
    api_router.include_router(public.router)

    app.include_router(health.router)
    app.include_router(api_router)

    return app


app = create_app()
