"""Monitor agent heartbeats, payment pushes and liveness."""

from .exceptions import (
    InvalidPushPayloadError,
    InvalidSignatureError,
    MonitorError,
    SecretKeyMissingError,
)
from .models import (
    HEARTBEAT_TIMEOUT_SECONDS,
    HeartbeatMessage,
    LivenessState,
    LivenessStatus,
    PushMessage,
    PushOutcome,
)
from .repository import SettingRepository

__all__ = [
    "HEARTBEAT_TIMEOUT_SECONDS",
    "HeartbeatMessage",
    "InvalidPushPayloadError",
    "InvalidSignatureError",
    "LivenessState",
    "LivenessStatus",
    "MonitorError",
    "PushMessage",
    "PushOutcome",
    "SecretKeyMissingError",
    "SettingRepository",
]
