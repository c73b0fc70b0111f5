"""Monitor ingestion specific exceptions."""

from paymonitor.core.signature import InvalidSignatureError


class MonitorError(Exception):
    """Base class for monitor ingestion errors."""


class SecretKeyMissingError(MonitorError):
    """Raised when the resolved account has no shared secret configured."""


class InvalidPushPayloadError(MonitorError, ValueError):
    """Raised when a verified push carries an unusable ``type`` or ``price``."""


__all__ = [
    "InvalidPushPayloadError",
    "InvalidSignatureError",
    "MonitorError",
    "SecretKeyMissingError",
]
