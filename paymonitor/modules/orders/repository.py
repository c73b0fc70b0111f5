"""Repository protocols for order persistence and amount/kind locks."""

from __future__ import annotations

from typing import Protocol, Sequence

from sqlalchemy.ext.asyncio import AsyncSessionTransaction

from paymonitor.db.models import PayOrder as PayOrderModel


class OrderRepository(Protocol):
    async def add(self, instance: PayOrderModel) -> PayOrderModel:
        ...

    async def get_by_code(self, order_code: str) -> PayOrderModel | None:
        ...

    async def find_latest_pending(
        self,
        account_id: int,
        kind: int,
        amount_cents: int,
        *,
        match_actual: bool,
    ) -> PayOrderModel | None:
        ...

    async def mark_paid(self, order_id: int, *, paid_at: int) -> PayOrderModel | None:
        """Pending -> paid; ``None`` when the row was no longer pending."""
        ...

    async def mark_closed(self, order_id: int, *, closed_at: int) -> PayOrderModel | None:
        """Pending -> closed; ``None`` when the row was no longer pending."""
        ...

    async def list_expired(
        self,
        *,
        account_id: int | None,
        created_before: int,
        limit: int,
    ) -> Sequence[PayOrderModel]:
        ...

    async def list_accounts_with_pending(self) -> list[int]:
        ...

    def savepoint(self) -> AsyncSessionTransaction:
        ...


class PriceLockRepository(Protocol):
    """Amount/kind lock taken by the order allocator and released on payment or close."""

    async def acquire(self, account_id: int, amount_cents: int, kind: int, order_code: str) -> bool:
        ...

    async def release(self, order_code: str) -> int:
        ...

    async def release_orphaned(self) -> int:
        """Remove locks whose order is missing or no longer pending."""
        ...
