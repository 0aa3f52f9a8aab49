"""Timestamp helpers.

Timestamps are stored as naive UTC so that values read back from any
provider compare cleanly with values computed in memory.
"""

from datetime import UTC, datetime


def utcnow() -> datetime:
    return datetime.now(UTC).replace(tzinfo=None)


def as_naive_utc(value: datetime | None) -> datetime | None:
    """Convert an aware datetime to naive UTC; naive values pass through."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(UTC).replace(tzinfo=None)


def parse_timestamp(value: str | None) -> datetime | None:
    """Parse an ISO-8601 date or datetime query parameter."""
    if not value:
        return None
    return as_naive_utc(datetime.fromisoformat(value.replace("Z", "+00:00")))
