"""
Time formatting and timestamp parsing utilities.
"""

import re
from datetime import datetime, timedelta, timezone

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
FRACTION_PATTERN = re.compile(r'(\d{2}:\d{2}:\d{2})[.,](\d+)')


def format_time(ms: float) -> str:
    """
    Format a duration in milliseconds to a human-readable string.

    Args:
        ms: Time in milliseconds

    Returns:
        Formatted time string (e.g., "12 ms", "123.45 ms", "2.34 s", "1m 30.50s")
    """
    if ms < 1000:
        if float(ms).is_integer():
            return f"{int(ms)} ms"
        return f"{ms:.2f} ms"
    elif ms < 60000:
        return f"{ms/1000:.2f} s"
    else:
        minutes = int(ms / 60000)
        seconds = (ms % 60000) / 1000
        return f"{minutes}m {seconds:.2f}s"


def parse_timestamp_ms(timestamp: str) -> float:
    """
    Convert an ISO-8601 timestamp to milliseconds since the Unix epoch.

    Timestamps without an offset are read as UTC, the way test runners
    serialize `Date` values.

    Args:
        timestamp: ISO-8601 string such as "2024-03-01T10:00:00.250Z"

    Returns:
        Epoch milliseconds as a float

    Raises:
        ValueError: If the string is not a valid ISO-8601 timestamp
    """
    value = timestamp.strip()
    if value.endswith(('Z', 'z')):
        value = value[:-1] + '+00:00'
    # fromisoformat before 3.11 only accepts 3 or 6 fractional digits
    value = FRACTION_PATTERN.sub(
        lambda m: m.group(1) + '.' + m.group(2)[:6].ljust(6, '0'), value, count=1
    )
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return (parsed - EPOCH) / timedelta(milliseconds=1)
