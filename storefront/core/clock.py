"""
UTC time helpers.

Timestamps are stored as ISO-8601 strings with millisecond precision and a
trailing ``Z`` (``2024-05-01T10:00:00.000Z``), the same shape browsers emit.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timezone

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def to_iso(dt: datetime) -> str:
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_iso(value: str) -> datetime:
    """Parse a stored timestamp back into an aware UTC datetime."""
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    dt = datetime.fromisoformat(value)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def date_key(dt: datetime) -> str:
    """Calendar day (UTC) used to key per-day records."""
    return dt.astimezone(timezone.utc).strftime("%Y-%m-%d")
