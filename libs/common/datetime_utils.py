"""Datetime utilities for timezone-aware UTC timestamps."""

from datetime import date, datetime, time, timezone


def utc_now() -> datetime:
    """Return timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC (SQLite drops tzinfo on the way back)."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def start_of_day_utc(value: date) -> datetime:
    """Midnight UTC on the given date."""
    return datetime.combine(value, time.min, tzinfo=timezone.utc)
