"""Order domain: statuses, payment kinds and persistence protocols.

Services live in :mod:`.matcher` and :mod:`.reclaimer`; they are not re-exported
here because the SQL repositories import this package.
"""

from .exceptions import (
    InvalidAmountError,
    InvalidOrderTransitionError,
    OrderError,
    UnknownPaymentKindError,
)
from .models import Order, OrderStatus, PaymentKind, new_pending_order, parse_amount_cents
from .repository import OrderRepository, PriceLockRepository

__all__ = [
    "InvalidAmountError",
    "InvalidOrderTransitionError",
    "Order",
    "OrderError",
    "OrderRepository",
    "OrderStatus",
    "PaymentKind",
    "PriceLockRepository",
    "UnknownPaymentKindError",
    "new_pending_order",
    "parse_amount_cents",
]
