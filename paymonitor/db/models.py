"""SQLAlchemy ORM models."""
from sqlalchemy import Boolean, Column, Integer, String, UniqueConstraint

from paymonitor.infrastructure.database.base import Base


class PayOrder(Base):
    __tablename__ = "pay_order"

    id = Column(Integer, primary_key=True, autoincrement=True)
    order_code = Column(String(64), unique=True, nullable=False, index=True)
    account_id = Column(Integer, nullable=False, index=True)
    kind = Column(Integer, nullable=False)
    requested_amount_cents = Column(Integer, nullable=False)
    actual_amount_cents = Column(Integer, nullable=False)
    status = Column(Integer, nullable=False, default=0, index=True)  # -1 closed, 0 pending, 1 paid, 2 notify_failed
    # epoch seconds, 0 means unset
    created_at = Column(Integer, nullable=False)
    paid_at = Column(Integer, nullable=False, default=0)
    closed_at = Column(Integer, nullable=False, default=0)


class AccountSetting(Base):
    __tablename__ = "settings"
    __table_args__ = (UniqueConstraint("account_id", "key", name="uq_settings_account_key"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    account_id = Column(Integer, nullable=False, index=True)
    key = Column(String(64), nullable=False, index=True)
    value = Column(String(255), nullable=False, default="")


class MerchantMapping(Base):
    __tablename__ = "merchant_mappings"

    app_id = Column(String(255), primary_key=True)
    account_id = Column(Integer, nullable=False, unique=True)
    is_active = Column(Boolean, nullable=False, default=True)


class PriceLock(Base):
    __tablename__ = "price_locks"

    lock_key = Column(String(64), primary_key=True)  # "{account_id}-{amount_cents}-{kind}"
    order_code = Column(String(64), nullable=False, index=True)
