"""SQLAlchemy implementation of the amount/kind lock table."""

from __future__ import annotations

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError

from paymonitor.db.models import PayOrder, PriceLock
from paymonitor.modules.common import AsyncRepository
from paymonitor.modules.orders.models import OrderStatus


def lock_key(account_id: int, amount_cents: int, kind: int) -> str:
    return f"{account_id}-{amount_cents}-{kind}"


class SqlPriceLockRepository(AsyncRepository[PriceLock]):
    async def acquire(self, account_id: int, amount_cents: int, kind: int, order_code: str) -> bool:
        try:
            async with self.savepoint():
                self.session.add(
                    PriceLock(lock_key=lock_key(account_id, amount_cents, kind), order_code=order_code)
                )
                await self.session.flush()
        except IntegrityError:
            return False
        return True

    async def release(self, order_code: str) -> int:
        result = await self.session.execute(delete(PriceLock).where(PriceLock.order_code == order_code))
        return result.rowcount or 0

    async def release_orphaned(self) -> int:
        """Drop locks whose order is missing or no longer pending."""
        owner_pending = (
            select(PayOrder.id)
            .where(
                PayOrder.order_code == PriceLock.order_code,
                PayOrder.status == int(OrderStatus.PENDING),
            )
            .exists()
        )
        stmt = delete(PriceLock).where(~owner_pending).execution_options(synchronize_session=False)
        result = await self.session.execute(stmt)
        return result.rowcount or 0
