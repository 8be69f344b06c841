"""
Centralized date and time utilities for the application.

Every instant handled by the stats engine is a UTC-aware datetime. Values
read back from MongoDB (which stores naive UTC), ISO strings from query
parameters and datetimes supplied by callers all pass through here before
they reach period windowing or queries.
"""

import logging
from datetime import UTC, date, datetime

from dateutil import parser

logger = logging.getLogger(__name__)


def get_current_utc_time() -> datetime:
    """Return the current time as a timezone-aware datetime object in UTC."""
    return datetime.now(UTC)


def ensure_utc(dt: datetime | None) -> datetime | None:
    """Return the datetime as an explicit UTC-aware value; naive means UTC."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def parse_timestamp(ts: str | datetime | None) -> datetime | None:
    """
    Parse an ISO 8601 string (or pass a datetime through) as a UTC instant.

    Offsets are converted to UTC; values without one are taken as UTC.

    Returns:
        A UTC-aware datetime, or None for empty or unparseable input.
    """
    if not ts:
        logger.debug("Received empty timestamp; returning None.")
        return None

    if isinstance(ts, datetime):
        return ensure_utc(ts)

    try:
        return ensure_utc(parser.isoparse(ts))
    except (ValueError, TypeError) as e:
        logger.warning("Failed to parse timestamp '%s': %s", ts, e)
        return None


def normalize_to_utc_datetime(value: str | datetime | date | None) -> datetime | None:
    """Normalize a query parameter or date to a UTC-aware datetime.

    Bare dates (``date`` objects or ``YYYY-MM-DD`` strings) map to midnight UTC.
    """
    if value is None:
        return None

    if isinstance(value, datetime):
        return ensure_utc(value)

    if isinstance(value, date):
        return datetime.combine(value, datetime.min.time(), tzinfo=UTC)

    if isinstance(value, str):
        return parse_timestamp(value.strip())

    logger.warning("Unsupported datetime input type '%s'", type(value))
    return None
