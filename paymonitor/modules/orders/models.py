"""Order domain models."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from enum import IntEnum

from paymonitor.db import models as orm

from .exceptions import InvalidAmountError, InvalidOrderTransitionError, UnknownPaymentKindError

# 金额以分存入 64 位整数列
MAX_AMOUNT_CENTS = 2**63 - 1


class OrderStatus(IntEnum):
    CLOSED = -1
    PENDING = 0
    PAID = 1
    # 通知下游失败，由通知重试流程处理
    NOTIFY_FAILED = 2

    def can_transition_to(self, target: "OrderStatus") -> bool:
        return target in _TRANSITIONS[self]

    def transition(self, target: "OrderStatus") -> "OrderStatus":
        if not self.can_transition_to(target):
            raise InvalidOrderTransitionError(f"{self.name} -> {target.name}")
        return target


_TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.PAID, OrderStatus.CLOSED}),
    OrderStatus.PAID: frozenset({OrderStatus.NOTIFY_FAILED}),
    OrderStatus.NOTIFY_FAILED: frozenset({OrderStatus.PAID}),
    OrderStatus.CLOSED: frozenset(),
}
assert set(_TRANSITIONS) == set(OrderStatus)


class PaymentKind(IntEnum):
    WECHAT = 1
    ALIPAY = 2

    @classmethod
    def parse(cls, code: str) -> "PaymentKind":
        try:
            return cls(int(code))
        except ValueError as exc:
            raise UnknownPaymentKindError(code) from exc


def parse_amount_cents(price: str) -> int:
    """Convert a decimal price string such as ``"1.01"`` to integer cents."""
    try:
        amount = Decimal(price.strip())
    except (InvalidOperation, AttributeError) as exc:
        raise InvalidAmountError(price) from exc
    if not amount.is_finite() or amount <= 0:
        raise InvalidAmountError(price)
    cents = amount * 100
    if cents != cents.to_integral_value() or cents > MAX_AMOUNT_CENTS:
        raise InvalidAmountError(price)
    return int(cents)


@dataclass(slots=True)
class Order:
    id: int
    order_code: str
    account_id: int
    kind: PaymentKind
    requested_amount_cents: int
    actual_amount_cents: int
    status: OrderStatus
    created_at: int
    paid_at: int
    closed_at: int

    @classmethod
    def from_orm(cls, instance: orm.PayOrder) -> "Order":
        return cls(
            id=int(instance.id),
            order_code=instance.order_code,
            account_id=int(instance.account_id),
            kind=PaymentKind(instance.kind),
            requested_amount_cents=instance.requested_amount_cents,
            actual_amount_cents=instance.actual_amount_cents,
            status=OrderStatus(instance.status),
            created_at=instance.created_at,
            paid_at=instance.paid_at or 0,
            closed_at=instance.closed_at or 0,
        )

    @property
    def is_pending(self) -> bool:
        return self.status is OrderStatus.PENDING


def new_pending_order(
    *,
    order_code: str,
    account_id: int,
    kind: PaymentKind,
    requested_amount_cents: int,
    actual_amount_cents: int,
    now: int,
) -> orm.PayOrder:
    """Build a pending order row; ``created_at`` is stamped here, not by a persistence hook."""
    return orm.PayOrder(
        order_code=order_code,
        account_id=account_id,
        kind=int(kind),
        requested_amount_cents=requested_amount_cents,
        actual_amount_cents=actual_amount_cents,
        status=int(OrderStatus.PENDING),
        created_at=now,
        paid_at=0,
        closed_at=0,
    )
