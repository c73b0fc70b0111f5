"""Signing helpers for monitor agent messages."""

from __future__ import annotations

import hashlib
import hmac
from typing import Sequence


class InvalidSignatureError(Exception):
    """Raised when a message signature does not match the recomputed digest."""


def compute_signature(fields: Sequence[str], timestamp: str, secret: str) -> str:
    """Return the md5 hex digest of ``fields + timestamp + secret`` concatenated."""
    payload = "".join(fields) + timestamp + secret
    return hashlib.md5(payload.encode("utf-8")).hexdigest()


def verify_signature(
    fields: Sequence[str],
    timestamp: str,
    provided_signature: str,
    secret: str,
) -> None:
    """Raise :class:`InvalidSignatureError` unless the signature matches exactly.

    Replays of an old, validly signed message are accepted: there is no
    freshness window on ``timestamp``.
    """
    expected = compute_signature(fields, timestamp, secret)
    if not hmac.compare_digest(expected.encode("utf-8"), provided_signature.encode("utf-8")):
        raise InvalidSignatureError("signature mismatch")


__all__ = ["InvalidSignatureError", "compute_signature", "verify_signature"]
