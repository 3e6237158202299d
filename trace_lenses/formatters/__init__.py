"""Formatting utilities for durations and timestamps."""

from .time_formatter import format_time, parse_timestamp_ms

__all__ = ["format_time", "parse_timestamp_ms"]
