"""UTC datetime helpers.

Timestamps written to documents and returned by the payment provider are
timezone-aware UTC.
"""

from datetime import UTC, datetime


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(UTC)


def ensure_utc(dt: datetime) -> datetime:
    """Attach UTC to a naive datetime, or convert an aware one to UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def from_timestamp_utc(timestamp: float) -> datetime:
    """Aware UTC datetime from Unix seconds (Stripe ``created`` fields)."""
    return datetime.fromtimestamp(timestamp, tz=UTC)
