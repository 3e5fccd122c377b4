from __future__ import annotations

from datetime import datetime, timezone


def to_naive_utc(value: datetime) -> datetime:
    """Normalize to naive UTC, the form stored in DATETIME columns."""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def isoformat_utc(value: datetime | None) -> str | None:
    if value is None:
        return None
    return value.replace(microsecond=0).isoformat() + "Z"


def format_minutes(minutes: int) -> str:
    """540 -> '09:00'."""
    return f"{minutes // 60:02d}:{minutes % 60:02d}"
