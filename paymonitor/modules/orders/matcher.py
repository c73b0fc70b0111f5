"""Correlate an observed payment with the pending order it belongs to."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from paymonitor.infrastructure.database.repositories.order_repository import SqlOrderRepository
from paymonitor.infrastructure.database.repositories.price_lock_repository import SqlPriceLockRepository

from .models import Order, OrderStatus, PaymentKind
from .repository import OrderRepository, PriceLockRepository

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class OrderMatcher:
    repository: OrderRepository
    locks: PriceLockRepository

    @classmethod
    def with_session(cls, session: AsyncSession) -> "OrderMatcher":
        return cls(SqlOrderRepository(session), SqlPriceLockRepository(session))

    async def find_candidate(self, account_id: int, amount_cents: int, kind: PaymentKind) -> Order | None:
        """Newest pending order on ``actual_amount``, falling back to ``requested_amount``."""
        model = await self.repository.find_latest_pending(
            account_id, int(kind), amount_cents, match_actual=True
        )
        if model is None:
            model = await self.repository.find_latest_pending(
                account_id, int(kind), amount_cents, match_actual=False
            )
        return Order.from_orm(model) if model else None

    async def match(
        self,
        account_id: int,
        amount_cents: int,
        kind: PaymentKind,
        now: int,
    ) -> Order | None:
        candidate = await self.find_candidate(account_id, amount_cents, kind)
        if candidate is None:
            logger.info(
                "未找到匹配的待支付订单: account=%s amount_cents=%s kind=%s",
                account_id,
                amount_cents,
                kind.name,
            )
            return None

        candidate.status.transition(OrderStatus.PAID)
        updated = await self.repository.mark_paid(candidate.id, paid_at=now)
        if updated is None:
            logger.info("订单 %s 已被其他流程处理，放弃本次匹配", candidate.order_code)
            return None

        order = Order.from_orm(updated)
        # 已支付订单不再占用该金额
        await self.locks.release(order.order_code)
        logger.info(
            "订单支付成功: order=%s account=%s amount_cents=%s",
            order.order_code,
            account_id,
            amount_cents,
        )
        return order


__all__ = ["OrderMatcher"]
