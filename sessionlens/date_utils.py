"""Shared timestamp normalization helpers."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any


def _parse_datetime_token(token: str) -> datetime | None:
    cleaned = token.strip()
    if not cleaned:
        return None
    try:
        return datetime.fromisoformat(cleaned.replace("Z", "+00:00"))
    except ValueError:
        pass
    for fmt in ("%Y-%m-%d %H:%M:%S", "%Y/%m/%d %H:%M:%S"):
        try:
            return datetime.strptime(cleaned, fmt).replace(tzinfo=timezone.utc)
        except ValueError:
            continue
    return None


def to_epoch_millis(value: Any) -> int:
    """Convert an ISO timestamp (or epoch number) into epoch milliseconds.

    Returns 0 when the value is missing or unparsable. Naive datetimes are
    treated as UTC.
    """
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, (int, float)):
        return int(value)
    if not isinstance(value, str):
        return 0
    parsed = _parse_datetime_token(value)
    if parsed is None:
        return 0
    dt = parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)
    return int(round(dt.timestamp() * 1000))
