from __future__ import annotations

import time
from datetime import datetime, timezone
from typing import Optional


def utcnow() -> datetime:
    """Till clock in UTC, stored naive."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def epoch_millis() -> int:
    """Milliseconds since the Unix epoch; used for time-derived record ids."""
    return int(time.time() * 1000)


def parse_iso_datetime(value: Optional[str]) -> Optional[datetime]:
    """
    ISO-8601 text to a naive UTC datetime.

    Blank input gives None. Offsets (including a trailing Z) are folded into
    UTC; text without an offset is taken to already be UTC.
    """
    if value is None or not value.strip():
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"

    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def to_utc_z(dt: Optional[datetime]) -> Optional[str]:
    """Render as "2025-02-11T05:20:00.000Z". Naive values are read as UTC."""
    if dt is None:
        return None
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc).replace(tzinfo=None)
    return dt.isoformat(timespec="milliseconds") + "Z"
