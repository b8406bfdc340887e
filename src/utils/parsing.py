"""Pure parsing and conversion utilities for loosely-typed backend payloads."""

from __future__ import annotations

import math
from datetime import datetime, timezone
from typing import Any, Optional


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def _is_number(value: Any) -> bool:
    """True for finite int/float values. ``bool`` is not a number here."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    try:
        return math.isfinite(value)
    except OverflowError:
        # JSON ints can exceed float range.
        return False


def _to_count(value: Any, default: int = 0) -> int:
    """Coerce a gauge to a non-negative int, falling back to ``default``."""
    if not _is_number(value) or value < 0:
        return default
    return int(value)


def _to_rate(value: Any, default: float = 0.0) -> float:
    if not _is_number(value) or value < 0:
        return default
    return float(value)


def _parse_datetime(value: Any) -> Optional[datetime]:
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if _is_number(value):
        # Epoch seconds, or milliseconds as sent by JS clients.
        seconds = value / 1000.0 if value > 1e11 else value
        try:
            return datetime.fromtimestamp(seconds, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    if isinstance(value, str) and value:
        raw = value.strip()
        if raw.endswith("Z"):
            raw = raw.replace("Z", "+00:00")
        try:
            dt = datetime.fromisoformat(raw)
            return dt if dt.tzinfo else dt.replace(tzinfo=timezone.utc)
        except ValueError:
            return None
    return None


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)
