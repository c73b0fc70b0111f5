"""Close pending orders that were never paid and release their amount/kind lock."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Protocol

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from paymonitor.infrastructure.database.repositories import (
    SqlOrderRepository,
    SqlPriceLockRepository,
    SqlSettingRepository,
)

from .models import Order, OrderStatus
from .repository import OrderRepository, PriceLockRepository

logger = logging.getLogger(__name__)

DEFAULT_CLOSE_TIMEOUT_MINUTES = 5
DEFAULT_INSPECT_TIMEOUT_MINUTES = 30
DEFAULT_BATCH_LIMIT = 100

# 账号级订单超时配置（分钟）
CLOSE_TIMEOUT_SETTING = "close"


class TimeoutSource(Protocol):
    async def get_value(self, account_id: int, key: str) -> str | None:
        ...


@dataclass(slots=True)
class ExpiryReclaimer:
    orders: OrderRepository
    locks: PriceLockRepository
    timeouts: TimeoutSource
    default_timeout_minutes: int = DEFAULT_CLOSE_TIMEOUT_MINUTES
    inspect_timeout_minutes: int = DEFAULT_INSPECT_TIMEOUT_MINUTES
    batch_limit: int = DEFAULT_BATCH_LIMIT

    @classmethod
    def with_session(cls, session: AsyncSession, **options) -> "ExpiryReclaimer":
        return cls(
            SqlOrderRepository(session),
            SqlPriceLockRepository(session),
            SqlSettingRepository(session),
            **options,
        )

    async def reclaim_batch(
        self,
        account_id: Optional[int],
        limit: int,
        timeout_minutes: int,
        now: int,
    ) -> int:
        """Close at most ``limit`` pending orders older than ``timeout_minutes``.

        ``account_id=None`` scans every account. Each row is transitioned in its
        own savepoint with a pending-only conditional update, so a row that was
        paid concurrently is skipped and a failing row does not abort the batch.
        """
        created_before = now - timeout_minutes * 60
        candidates = await self.orders.list_expired(
            account_id=account_id,
            created_before=created_before,
            limit=limit,
        )
        closed = 0
        for model in candidates:
            order = Order.from_orm(model)
            if not order.status.can_transition_to(OrderStatus.CLOSED):
                continue
            try:
                async with self.orders.savepoint():
                    updated = await self.orders.mark_closed(order.id, closed_at=now)
                    if updated is None:
                        continue
                    await self.locks.release(order.order_code)
            except SQLAlchemyError:
                logger.exception("关闭过期订单 %s 失败", order.order_code)
                continue
            closed += 1
        return closed

    async def reclaim_all(self, now: int) -> int:
        """Reclaim for every account with pending orders using its own timeout."""
        total = 0
        for account_id in await self.orders.list_accounts_with_pending():
            try:
                timeout = await self.timeout_for(account_id)
                total += await self.reclaim_batch(account_id, self.batch_limit, timeout, now)
            except SQLAlchemyError:
                logger.exception("账号 %s 过期订单回收失败", account_id)
        await self.release_orphaned_locks()
        return total

    async def release_orphaned_locks(self) -> int:
        try:
            async with self.orders.savepoint():
                released = await self.locks.release_orphaned()
        except SQLAlchemyError:
            logger.exception("清理失效金额锁失败")
            return 0
        if released:
            logger.info("清理失效金额锁 %d 条", released)
        return released

    async def timeout_for(self, account_id: int) -> int:
        raw = await self.timeouts.get_value(account_id, CLOSE_TIMEOUT_SETTING)
        try:
            minutes = int(raw) if raw else 0
        except ValueError:
            minutes = 0
        return minutes if minutes > 0 else self.default_timeout_minutes

    async def get_expired_orders(
        self,
        account_id: Optional[int],
        now: int,
        limit: int = 0,
        timeout_minutes: Optional[int] = None,
    ) -> list[Order]:
        """Read-only view of stale pending orders, defaulting to the wider inspection window."""
        minutes = self.inspect_timeout_minutes if timeout_minutes is None else timeout_minutes
        models = await self.orders.list_expired(
            account_id=account_id,
            created_before=now - minutes * 60,
            limit=limit,
        )
        return [Order.from_orm(model) for model in models]


__all__ = [
    "CLOSE_TIMEOUT_SETTING",
    "DEFAULT_CLOSE_TIMEOUT_MINUTES",
    "DEFAULT_INSPECT_TIMEOUT_MINUTES",
    "ExpiryReclaimer",
]
