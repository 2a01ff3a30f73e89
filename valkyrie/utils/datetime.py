"""
DateTime Utility Module

Every datetime handled by the application carries the UTC timezone.
SQLite hands back naive values, so anything read from the database goes
through ensure_utc before it is compared.
"""

import logging
from datetime import datetime, timezone

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    """
    Current time with the UTC timezone attached.

    Example:
        >>> utc_now().tzinfo == timezone.utc
        True
    """
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime) -> datetime:
    """
    Convert a datetime to UTC. Naive datetimes are assumed to be UTC already.

    Example:
        >>> ensure_utc(datetime(2025, 1, 1, 12, 0, 0)).tzinfo == timezone.utc
        True
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    elif dt.tzinfo != timezone.utc:
        logger.debug(f"Converting {dt.tzinfo} to UTC: {dt}")
        return dt.astimezone(timezone.utc)
    return dt
