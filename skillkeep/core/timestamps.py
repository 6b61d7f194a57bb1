"""
RFC3339 timestamp helpers.

Snapshot documents store timestamps as second-precision RFC3339 strings in
UTC (``2025-01-01T12:00:00Z``). Parsing rejects strings without an offset so
that a restored time is never silently reinterpreted in local time.
"""

from __future__ import annotations

import re
from datetime import UTC, datetime

# Extended form only: "T" separator, optional fraction, "Z" or +hh:mm offset
RFC3339_PATTERN = re.compile(r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(\.\d{1,6})?(Z|[+-]\d{2}:\d{2})")


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(UTC)


def ensure_utc(value: datetime) -> datetime:
    """Return an aware UTC datetime; naive values are assumed to be UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def format_timestamp(value: datetime) -> str:
    """Format a datetime as a second-precision RFC3339 UTC string."""
    return ensure_utc(value).replace(microsecond=0).strftime("%Y-%m-%dT%H:%M:%SZ")


def parse_timestamp(raw: str) -> datetime:
    """
    Parse an RFC3339 string into an aware UTC datetime.

    Raises:
        ValueError: If the string is not a valid timestamp with an offset
    """
    if not isinstance(raw, str) or not RFC3339_PATTERN.fullmatch(raw):
        raise ValueError(f"not an RFC3339 timestamp: {raw!r}")
    fmt = "%Y-%m-%dT%H:%M:%S.%f%z" if "." in raw else "%Y-%m-%dT%H:%M:%S%z"
    return datetime.strptime(raw, fmt).astimezone(UTC)
