"""Conversions between epoch-millisecond timestamps and datetimes."""

from __future__ import annotations

from datetime import UTC, datetime

import pendulum


def to_epoch_millis(value: int | str | datetime, default_tz: str = "UTC") -> int:
    """Normalize a timestamp to milliseconds since the epoch.

    Accepts:
    - integers, taken as epoch milliseconds already
    - strings of digits, taken as epoch milliseconds
    - ISO 8601 and lax datetime strings (2026-02-02 22:21:29+00, 2026-02-02)
    - datetimes; naive values are interpreted in default_tz

    Raises ValueError for anything that cannot be parsed.
    """
    if isinstance(value, bool):
        raise ValueError(f"Not a timestamp: {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=pendulum.timezone(default_tz))  # type: ignore[arg-type]
        return int(value.timestamp() * 1000)

    value_str = value.strip()
    if value_str.lstrip("-").isdigit():
        return int(value_str)

    try:
        parsed = pendulum.parse(value_str, tz=default_tz, strict=False)
    except ValueError as exc:
        raise ValueError(f"Invalid timestamp: {value_str!r}") from exc
    if isinstance(parsed, pendulum.DateTime):
        return int(parsed.timestamp() * 1000)
    # Durations and bare times parse too but name no instant
    if not isinstance(parsed, pendulum.Date):
        raise ValueError(f"Invalid timestamp: {value_str!r}")
    midnight = pendulum.datetime(parsed.year, parsed.month, parsed.day, tz=default_tz)
    return int(midnight.timestamp() * 1000)


def from_epoch_millis(millis: int) -> datetime:
    """Return an aware UTC datetime for an epoch-millisecond timestamp."""
    return datetime.fromtimestamp(millis / 1000, tz=UTC)


def format_iso(dt: datetime) -> str:
    """Format a datetime as ISO 8601, assuming UTC for naive values."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt.isoformat()
