"""
Time helpers.

Timestamps are stored as naive UTC datetimes (SQLite has no timezone support),
so every comparison against a stored column goes through `utcnow()`.
"""

from datetime import datetime, timedelta, timezone


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def week_bounds(moment: datetime) -> tuple[datetime, datetime]:
    """
    Return the [start, end) bounds of the ISO week (Monday 00:00) containing `moment`.
    """
    start = (moment - timedelta(days=moment.weekday())).replace(hour=0, minute=0, second=0, microsecond=0)
    return start, start + timedelta(days=7)
