from __future__ import annotations

from datetime import datetime, timedelta, timezone


def now_utc() -> datetime:
    """Return current time as tz-aware UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_aware(dt: datetime) -> datetime:
    """Return dt converted to UTC. Raises on naive datetimes."""
    if not isinstance(dt, datetime):
        raise TypeError("dt must be a datetime")
    if dt.tzinfo is None:
        raise ValueError("naive datetime is not allowed; timezone-aware required")
    return dt.astimezone(timezone.utc)


def parse_rfc3339(value: str) -> datetime:
    """
    Parse an RFC3339 timestamp (as stored in the config table) into UTC.

    Accepts "Z" or numeric offsets, with or without fractional seconds.
    """
    if not isinstance(value, str) or not value.strip():
        raise ValueError("RFC3339 value must be a non-empty string")

    s = value.strip()
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"

    return ensure_aware(datetime.fromisoformat(s))


def to_rfc3339(dt: datetime) -> str:
    """Format dt as RFC3339 UTC with a trailing 'Z' (microseconds kept if present)."""
    dt = ensure_aware(dt)
    timespec = "microseconds" if dt.microsecond else "seconds"
    return dt.isoformat(timespec=timespec).replace("+00:00", "Z")


def is_due(deadline: datetime, now: datetime) -> bool:
    """True when deadline is at or before now (an exact match counts as due)."""
    return ensure_aware(deadline) <= ensure_aware(now)


def remaining_until(deadline: datetime, now: datetime) -> timedelta:
    """Time left until deadline, clamped at zero."""
    left = ensure_aware(deadline) - ensure_aware(now)
    if left < timedelta(0):
        return timedelta(0)
    return left
