"""Epoch-second helpers shared by the sweeps and the ingestion path."""

from __future__ import annotations

import time
from typing import Optional


def utc_timestamp() -> int:
    return int(time.time())


def parse_timestamp(value: Optional[str]) -> Optional[int]:
    """Parse a stored epoch-seconds string; ``None`` when unset or unusable."""
    if not value:
        return None
    try:
        parsed = int(value)
    except ValueError:
        return None
    return parsed if parsed > 0 else None


__all__ = ["parse_timestamp", "utc_timestamp"]
