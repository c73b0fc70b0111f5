"""SQLAlchemy powered repository for pay orders."""

from __future__ import annotations

from typing import Sequence

from sqlalchemy import select, update

from paymonitor.db.models import PayOrder as PayOrderModel
from paymonitor.modules.common import AsyncRepository
from paymonitor.modules.orders.models import OrderStatus

_PENDING = int(OrderStatus.PENDING)


class SqlOrderRepository(AsyncRepository[PayOrderModel]):
    async def get_by_code(self, order_code: str) -> PayOrderModel | None:
        stmt = select(PayOrderModel).where(PayOrderModel.order_code == order_code)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def find_latest_pending(
        self,
        account_id: int,
        kind: int,
        amount_cents: int,
        *,
        match_actual: bool,
    ) -> PayOrderModel | None:
        amount_column = (
            PayOrderModel.actual_amount_cents if match_actual else PayOrderModel.requested_amount_cents
        )
        stmt = (
            select(PayOrderModel)
            .where(
                PayOrderModel.account_id == account_id,
                PayOrderModel.kind == kind,
                PayOrderModel.status == _PENDING,
                amount_column == amount_cents,
            )
            .order_by(PayOrderModel.created_at.desc(), PayOrderModel.id.desc())
            .limit(1)
        )
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def mark_paid(self, order_id: int, *, paid_at: int) -> PayOrderModel | None:
        return await self._transition_pending(
            order_id,
            status=int(OrderStatus.PAID),
            paid_at=paid_at,
        )

    async def mark_closed(self, order_id: int, *, closed_at: int) -> PayOrderModel | None:
        return await self._transition_pending(
            order_id,
            status=int(OrderStatus.CLOSED),
            closed_at=closed_at,
        )

    async def list_expired(
        self,
        *,
        account_id: int | None,
        created_before: int,
        limit: int,
    ) -> Sequence[PayOrderModel]:
        stmt = select(PayOrderModel).where(
            PayOrderModel.status == _PENDING,
            PayOrderModel.created_at < created_before,
        )
        if account_id is not None:
            stmt = stmt.where(PayOrderModel.account_id == account_id)
        stmt = stmt.order_by(PayOrderModel.created_at.asc(), PayOrderModel.id.asc())
        if limit > 0:
            stmt = stmt.limit(limit)
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def list_accounts_with_pending(self) -> list[int]:
        stmt = (
            select(PayOrderModel.account_id)
            .where(PayOrderModel.status == _PENDING)
            .distinct()
            .order_by(PayOrderModel.account_id)
        )
        result = await self.session.execute(stmt)
        return [int(account_id) for account_id in result.scalars().all()]

    async def _transition_pending(self, order_id: int, **values: int) -> PayOrderModel | None:
        # 仅当订单仍处于待支付状态时才更新，零行即已被其他流程处理
        stmt = (
            update(PayOrderModel)
            .where(PayOrderModel.id == order_id, PayOrderModel.status == _PENDING)
            .values(**values)
            .execution_options(synchronize_session="fetch")
            .returning(PayOrderModel)
        )
        result = await self.session.execute(stmt)
        return result.scalars().first()
