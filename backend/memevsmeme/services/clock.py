from __future__ import annotations
from datetime import datetime, timezone as dt_tz


def utcnow() -> datetime:
    return datetime.now(dt_tz.utc)


def as_utc(dt: datetime) -> datetime:
    """
    Normalize a datetime to aware UTC.

    Naive values are taken to already be UTC: that is how every timestamp is
    written, and some drivers (SQLite) hand them back without tzinfo.
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=dt_tz.utc)
    return dt.astimezone(dt_tz.utc)


def day_key(dt: datetime) -> str:
    """UTC calendar date as YYYY-MM-DD."""
    return as_utc(dt).date().isoformat()
