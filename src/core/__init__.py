"""
Core module for the Ticketdesk API.

Exports the main configuration used across the application.
"""

from src.core.config import settings

__all__ = [
    # Config
    "settings",
]
