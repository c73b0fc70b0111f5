"""Periodic expiry and liveness sweeps with cooperative shutdown."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Awaitable, Callable, Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from paymonitor.core.config import Settings
from paymonitor.core.timeutils import utc_timestamp
from paymonitor.modules.monitor.heartbeat import HeartbeatTracker
from paymonitor.modules.monitor.models import HEARTBEAT_TIMEOUT_SECONDS
from paymonitor.modules.orders.reclaimer import (
    DEFAULT_BATCH_LIMIT,
    DEFAULT_CLOSE_TIMEOUT_MINUTES,
    ExpiryReclaimer,
)

logger = logging.getLogger(__name__)

Job = Callable[[], Awaitable[int]]


class Scheduler:
    """Runs the expiry loop and the liveness loop as two asyncio tasks.

    ``start`` and ``stop`` must not be called concurrently. ``stop`` sets a single
    event observed by both loops and waits for them, so a sweep already in flight
    always completes; only the next tick is prevented.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        *,
        interval_seconds: float = 60,
        heartbeat_timeout: int = HEARTBEAT_TIMEOUT_SECONDS,
        close_timeout_minutes: int = DEFAULT_CLOSE_TIMEOUT_MINUTES,
        reclaim_batch_limit: int = DEFAULT_BATCH_LIMIT,
        clock: Callable[[], int] = utc_timestamp,
    ) -> None:
        self._session_factory = session_factory
        self.interval_seconds = interval_seconds
        self.heartbeat_timeout = heartbeat_timeout
        self.close_timeout_minutes = close_timeout_minutes
        self.reclaim_batch_limit = reclaim_batch_limit
        self._clock = clock
        self._running = False
        self._stop_event: Optional[asyncio.Event] = None
        self._tasks: list[asyncio.Task] = []

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        session_factory: async_sessionmaker[AsyncSession],
    ) -> "Scheduler":
        return cls(
            session_factory,
            interval_seconds=settings.scheduler.interval_seconds,
            heartbeat_timeout=settings.heartbeat_timeout,
            close_timeout_minutes=settings.orders.close_timeout_minutes,
            reclaim_batch_limit=settings.orders.reclaim_batch_limit,
        )

    @property
    def running(self) -> bool:
        return self._running

    def start(self) -> None:
        if self._running:
            return
        self._running = True
        self._stop_event = asyncio.Event()
        self._tasks = [
            asyncio.create_task(self._loop("过期订单回收", self.run_reclaim_once, self._stop_event)),
            asyncio.create_task(self._loop("监控端状态检查", self.run_liveness_once, self._stop_event)),
        ]
        logger.info("定时任务调度器启动")

    async def stop(self) -> None:
        if not self._running:
            return
        self._running = False
        assert self._stop_event is not None
        self._stop_event.set()
        tasks, self._tasks = self._tasks, []
        await asyncio.gather(*tasks, return_exceptions=True)
        logger.info("定时任务调度器停止")

    async def run_reclaim_once(self) -> int:
        async with self._session_factory() as session:
            reclaimer = ExpiryReclaimer.with_session(
                session,
                default_timeout_minutes=self.close_timeout_minutes,
                batch_limit=self.reclaim_batch_limit,
            )
            closed = await reclaimer.reclaim_all(self._clock())
            await session.commit()
        return closed

    async def run_liveness_once(self) -> int:
        async with self._session_factory() as session:
            tracker = HeartbeatTracker.with_session(session, self.heartbeat_timeout)
            downgraded = await tracker.sweep_all(self._clock())
            await session.commit()
        return downgraded

    async def _loop(self, name: str, job: Job, stop_event: asyncio.Event) -> None:
        logger.info("%s定时任务启动", name)
        while True:
            await self._tick(name, job)
            try:
                await asyncio.wait_for(stop_event.wait(), timeout=self.interval_seconds)
            except asyncio.TimeoutError:
                continue
            break
        logger.info("%s定时任务停止", name)

    async def _tick(self, name: str, job: Job) -> None:
        started = time.perf_counter()
        try:
            affected = await job()
        except Exception:  # pylint: disable=broad-except
            logger.exception("定时任务：%s失败", name)
            return
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info("定时任务：%s完成，处理 %d 条，耗时 %.2fms", name, affected, elapsed_ms)
