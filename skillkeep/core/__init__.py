"""Shared helpers used across skillkeep modules."""

from .timestamps import format_timestamp, parse_timestamp, utcnow

__all__ = ["format_timestamp", "parse_timestamp", "utcnow"]
