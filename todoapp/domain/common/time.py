from __future__ import annotations

from datetime import date, datetime, time, timezone


def ensure_aware(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        raise ValueError("datetime must be timezone-aware")
    return dt


def to_iso(dt: datetime) -> str:
    ensure_aware(dt)
    return dt.isoformat()


def to_epoch_ms(dt: datetime) -> int:
    ensure_aware(dt)
    return int(dt.timestamp() * 1000)


def utc_midnight(day: date) -> datetime:
    return datetime.combine(day, time.min, tzinfo=timezone.utc)
