"""
API routes for the ticket desk.

This package contains all API endpoint definitions organized by feature.
"""

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

__all__ = [
    "activity_logs",
    "audit_logs",
    "auth",
    "categories",
    "dashboard",
    "health",
    "locations",
    "notifications",
    "public",
    "reports",
    "roles",
    "saved_views",
    "tickets",
    "users",
]
