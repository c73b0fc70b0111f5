"""Simple dependency container for wiring core services."""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import lru_cache
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from paymonitor.core.config import Settings, get_settings
from paymonitor.infrastructure.database.session import get_engine, get_session_factory
from paymonitor.modules.scheduler import Scheduler


@dataclass(slots=True)
class ApplicationContainer:
    settings: Settings
    session_factory: Optional[async_sessionmaker[AsyncSession]] = None
    scheduler: Optional[Scheduler] = field(default=None)

    def init_infrastructure(self) -> None:
        """Ensure infrastructure singletons (database engine, session factory) are initialised."""
        get_engine()
        if self.session_factory is None:
            self.session_factory = get_session_factory()

    def build_scheduler(self) -> Scheduler:
        if self.scheduler is None:
            if self.session_factory is None:
                self.init_infrastructure()
            assert self.session_factory is not None
            self.scheduler = Scheduler.from_settings(self.settings, self.session_factory)
        return self.scheduler


@lru_cache()
def get_container() -> ApplicationContainer:
    container = ApplicationContainer(settings=get_settings())
    container.init_infrastructure()
    return container


__all__ = ["ApplicationContainer", "get_container"]
