"""Monitor ingestion dependency providers."""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from paymonitor.core.config import Settings, get_settings
from paymonitor.modules.monitor.service import MonitorService

from .database import get_db_session


def get_app_settings() -> Settings:
    return get_settings()


def get_monitor_service(
    db: AsyncSession = Depends(get_db_session),
    settings: Settings = Depends(get_app_settings),
) -> MonitorService:
    return MonitorService.with_session(
        db,
        default_account_id=settings.default_account_id,
        heartbeat_timeout=settings.heartbeat_timeout,
    )


__all__ = [
    "get_app_settings",
    "get_monitor_service",
]
