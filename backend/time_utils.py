"""
UTC helpers.

Timestamps are written timezone-aware (UTC). Some backends (SQLite through
plain DateTime columns) hand them back naive, so anything read from the
store goes through to_utc() before it is compared or bucketed.
"""
from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone
from typing import Optional


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def to_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """Return dt as aware UTC. Naive input is assumed to be UTC already."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def utc_date(dt: datetime) -> date:
    """UTC calendar date of dt."""
    return to_utc(dt).date()


def start_of_day(d: date) -> datetime:
    return datetime.combine(d, time.min, tzinfo=timezone.utc)


def start_of_week(d: date) -> datetime:
    """Monday 00:00 UTC of the ISO week containing d."""
    return start_of_day(d - timedelta(days=d.weekday()))


def start_of_month(d: date) -> datetime:
    return start_of_day(d.replace(day=1))


def start_of_year(d: date) -> datetime:
    return start_of_day(d.replace(month=1, day=1))
