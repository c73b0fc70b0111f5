"""SQLAlchemy-backed repository implementations."""

from .merchant_repository import SqlMerchantRepository
from .order_repository import SqlOrderRepository
from .price_lock_repository import SqlPriceLockRepository
from .setting_repository import SqlSettingRepository

__all__ = [
    "SqlMerchantRepository",
    "SqlOrderRepository",
    "SqlPriceLockRepository",
    "SqlSettingRepository",
]
