"""Reusable FastAPI dependencies."""

from .database import get_db_session
from .monitor import get_app_settings, get_monitor_service

__all__ = [
    "get_app_settings",
    "get_db_session",
    "get_monitor_service",
]
