"""Time Utilities for UTC management"""

from datetime import date, datetime, timezone


def get_utc_now() -> datetime:
    """Naive UTC datetime, without the ``datetime.utcnow()`` deprecation"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def get_utc_today() -> date:
    """Current UTC calendar date; ``isoformat()`` gives YYYY-MM-DD"""
    return get_utc_now().date()
