"""
Centralized utilities for time handling in RecallStack.
Goal: every timestamp the scheduler compares is timezone-aware UTC.
"""
from datetime import datetime, timezone
from typing import Optional


def utcnow() -> datetime:
    """
    Get the current timezone-aware UTC datetime.
    Always use this instead of datetime.utcnow() or datetime.now().
    """
    return datetime.now(timezone.utc)


def ensure_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """Return ``dt`` as an aware UTC datetime; naive values are read as UTC.

    SQLite hands back naive datetimes even for ``DateTime(timezone=True)``
    columns, so everything read from the store goes through here.
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)
