"""
Date and time utility functions.

All persisted timestamps are naive UTC.
"""

from datetime import date, datetime, timezone


def utcnow() -> datetime:
    """Get current UTC datetime without tzinfo."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def today() -> date:
    """Get current UTC date."""
    return utcnow().date()


def parse_published_date(value):
    """Parse provider dates that may be ``YYYY``, ``YYYY-MM`` or ``YYYY-MM-DD``."""
    if not value:
        return None
    parts = str(value).split("-")
    try:
        year = int(parts[0])
        month = int(parts[1]) if len(parts) > 1 else 1
        day = int(parts[2][:2]) if len(parts) > 2 else 1
        return date(year, month, day)
    except (ValueError, IndexError):
        return None
