"""ISO 8601 and unix-time conversion utilities.

All timestamps handled by authtrail are timezone-aware UTC. Token claims use
integer unix seconds; storage and JSON responses use ISO 8601 strings.
"""

from datetime import datetime, UTC


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(UTC)


def to_timestamp(dt: datetime) -> str:
    """Convert datetime to ISO 8601 UTC timestamp string."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC).isoformat().replace("+00:00", "Z")


def to_datetime(timestamp: str) -> datetime:
    """Convert ISO 8601 UTC timestamp string to datetime."""
    return datetime.fromisoformat(timestamp.replace('Z', '+00:00'))


def now() -> str:
    """Get current UTC timestamp as ISO 8601 string."""
    return to_timestamp(utcnow())


def to_unix(dt: datetime) -> int:
    """Convert datetime to integer unix seconds (naive values are UTC)."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return int(dt.timestamp())


def from_unix(ts: int) -> datetime:
    """Convert unix seconds to an aware UTC datetime."""
    return datetime.fromtimestamp(ts, UTC)


def now_unix() -> int:
    """Get current UTC time as integer unix seconds."""
    return to_unix(utcnow())
