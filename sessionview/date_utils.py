"""Shared timestamp parsing and formatting helpers."""
from __future__ import annotations

from datetime import datetime, timezone


def _as_utc(value: datetime) -> datetime:
    dt = value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def parse_iso_timestamp(value: str | None) -> datetime | None:
    """Parse an ISO-8601 timestamp into an aware UTC datetime.

    Naive values are taken as UTC. Fractional seconds of any width are
    accepted (Python 3.11 ``fromisoformat``). Returns None for empty or
    unparseable input.
    """
    raw = (value or "").strip()
    if not raw:
        return None
    try:
        parsed = datetime.fromisoformat(raw.replace("Z", "+00:00"))
    except (ValueError, TypeError):
        return None
    return _as_utc(parsed)


def format_iso_utc(value: datetime) -> str:
    """Format a datetime the way log writers emit it: millisecond precision, ``Z`` suffix."""
    return _as_utc(value).isoformat(timespec="milliseconds").replace("+00:00", "Z")
