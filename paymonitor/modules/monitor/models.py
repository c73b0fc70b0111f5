"""Monitor agent domain models."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from paymonitor.core.timeutils import parse_timestamp
from paymonitor.modules.orders.models import Order

# 账号设置中与监控端相关的键
SECRET_KEY = "key"
LAST_HEARTBEAT_KEY = "lastheart"
LAST_PAYMENT_KEY = "lastpay"
LIVENESS_FLAG_KEY = "jkstate"

HEARTBEAT_TIMEOUT_SECONDS = 180


class LivenessState(str, Enum):
    UNKNOWN = "unknown"
    ONLINE = "online"
    OFFLINE = "offline"

    @property
    def flag(self) -> str:
        """Value persisted under ``jkstate``."""
        return "1" if self is LivenessState.ONLINE else "0"

    @classmethod
    def from_record(cls, flag: Optional[str], last_heartbeat_at: Optional[int]) -> "LivenessState":
        if last_heartbeat_at is None:
            return cls.UNKNOWN
        return cls.ONLINE if flag == "1" else cls.OFFLINE


@dataclass(slots=True)
class LivenessStatus:
    account_id: int
    online_state: LivenessState
    last_heartbeat_at: Optional[int]
    last_payment_at: Optional[int]

    @classmethod
    def from_settings(cls, account_id: int, values: dict[str, str]) -> "LivenessStatus":
        last_heartbeat_at = parse_timestamp(values.get(LAST_HEARTBEAT_KEY))
        return cls(
            account_id=account_id,
            online_state=LivenessState.from_record(values.get(LIVENESS_FLAG_KEY), last_heartbeat_at),
            last_heartbeat_at=last_heartbeat_at,
            last_payment_at=parse_timestamp(values.get(LAST_PAYMENT_KEY)),
        )


@dataclass(slots=True)
class HeartbeatMessage:
    t: str
    sign: str
    appid: Optional[str] = None


@dataclass(slots=True)
class PushMessage:
    t: str
    sign: str
    type: str
    price: str
    appid: Optional[str] = None

    @property
    def signed_fields(self) -> list[str]:
        return [self.type, self.price]


@dataclass(slots=True)
class PushOutcome:
    account_id: int
    order: Optional[Order]

    @property
    def matched(self) -> bool:
        return self.order is not None
