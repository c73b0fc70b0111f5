"""Liveness tracking for monitor agents, persisted in per-account settings."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from paymonitor.core.timeutils import parse_timestamp, utc_timestamp
from paymonitor.infrastructure.database.repositories.setting_repository import SqlSettingRepository

from .models import (
    HEARTBEAT_TIMEOUT_SECONDS,
    LAST_HEARTBEAT_KEY,
    LAST_PAYMENT_KEY,
    LIVENESS_FLAG_KEY,
    LivenessState,
    LivenessStatus,
)
from .repository import SettingRepository

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class HeartbeatTracker:
    repository: SettingRepository
    timeout: int = HEARTBEAT_TIMEOUT_SECONDS

    @classmethod
    def with_session(cls, session: AsyncSession, timeout: int = HEARTBEAT_TIMEOUT_SECONDS) -> "HeartbeatTracker":
        return cls(SqlSettingRepository(session), timeout)

    async def record_heartbeat(self, account_id: int, now: int) -> None:
        previous = parse_timestamp(await self.repository.get_value(account_id, LAST_HEARTBEAT_KEY))
        # 时钟回拨时保留较新的心跳时间
        latest = max(previous or 0, now)
        await self.repository.set_value(account_id, LAST_HEARTBEAT_KEY, str(latest))
        await self.repository.set_value(account_id, LIVENESS_FLAG_KEY, LivenessState.ONLINE.flag)

    async def record_payment(self, account_id: int, now: int) -> None:
        await self.repository.set_value(account_id, LAST_PAYMENT_KEY, str(now))

    async def sweep_one(self, account_id: int, now: int, timeout: Optional[int] = None) -> bool:
        """Downgrade the account to offline when its heartbeat is missing or stale.

        Returns ``True`` when a downgrade was written. Never marks an account online.
        """
        values = await self.repository.get_values(account_id, (LAST_HEARTBEAT_KEY, LIVENESS_FLAG_KEY))
        return await self._sweep(
            account_id,
            values.get(LAST_HEARTBEAT_KEY),
            values.get(LIVENESS_FLAG_KEY),
            now,
            self.timeout if timeout is None else timeout,
        )

    async def sweep_all(self, now: int) -> int:
        downgraded = 0
        for account_id, raw in await self.repository.list_by_key(LAST_HEARTBEAT_KEY):
            try:
                async with self.repository.savepoint():
                    flag = await self.repository.get_value(account_id, LIVENESS_FLAG_KEY)
                    if await self._sweep(account_id, raw, flag, now, self.timeout):
                        downgraded += 1
            except SQLAlchemyError:
                logger.exception("账号 %s 监控端状态检查失败", account_id)
        return downgraded

    async def read_status(self, account_id: int, now: Optional[int] = None) -> LivenessStatus:
        values = await self.repository.get_values(
            account_id,
            (LAST_HEARTBEAT_KEY, LAST_PAYMENT_KEY, LIVENESS_FLAG_KEY),
        )
        status = LivenessStatus.from_settings(account_id, values)
        now = utc_timestamp() if now is None else now
        if status.online_state is LivenessState.ONLINE and self.is_stale(status.last_heartbeat_at, now):
            # 尚未被定时任务降级的过期心跳
            status.online_state = LivenessState.OFFLINE
        return status

    def is_stale(self, last_heartbeat_at: Optional[int], now: int, timeout: Optional[int] = None) -> bool:
        if last_heartbeat_at is None:
            return True
        return now - last_heartbeat_at >= (self.timeout if timeout is None else timeout)

    async def _sweep(
        self,
        account_id: int,
        raw_heartbeat: Optional[str],
        flag: Optional[str],
        now: int,
        timeout: int,
    ) -> bool:
        if not self.is_stale(parse_timestamp(raw_heartbeat), now, timeout):
            return False
        offline = LivenessState.OFFLINE.flag
        if flag == offline:
            return False
        await self.repository.set_value(account_id, LIVENESS_FLAG_KEY, offline)
        logger.info("账号 %s 监控端心跳超时，标记为掉线", account_id)
        return True
