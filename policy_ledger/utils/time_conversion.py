"""
Time conversion utilities for the policy ledger.

All ledger time comes from the hosting transaction, so these helpers only
parse, normalise and compare timestamps; nothing here reads a clock except
``utc_now``, which the CLI uses to play the part of the host.
"""

from datetime import datetime, timezone

from dateutil import parser as date_parser


def ensure_utc(value: datetime) -> datetime:
    """
    Normalise a datetime to timezone-aware UTC.

    Naive datetimes are assumed to already be in UTC.

    Args:
        value: Datetime to normalise

    Returns:
        Timezone-aware UTC datetime
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_timestamp(value: str) -> datetime:
    """
    Parse an ISO-8601 timestamp into an aware UTC datetime.

    Args:
        value: Timestamp string, e.g. ``2024-01-01T09:30:00Z``

    Returns:
        Timezone-aware UTC datetime

    Raises:
        ValueError: If the string is not a valid ISO-8601 timestamp
    """
    return ensure_utc(date_parser.isoparse(value))


def utc_now() -> datetime:
    """Current wall-clock time in UTC."""
    return datetime.now(timezone.utc)
