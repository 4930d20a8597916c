"""Unit conversion and human-readable formatting helpers."""

from __future__ import annotations

from datetime import datetime, timezone

BYTES_PER_MB = 1024 * 1024
BYTES_PER_GB = 1024 * 1024 * 1024

SECOND_MS = 1000
MINUTE_MS = SECOND_MS * 60
HOUR_MS = MINUTE_MS * 60
DAY_MS = HOUR_MS * 24


def convert_bytes_to_mb(size_bytes: int) -> float:
    return size_bytes / BYTES_PER_MB


def convert_bytes_to_gb(size_bytes: int) -> float:
    return size_bytes / BYTES_PER_GB


def human_duration(duration_ms: int) -> str:
    """Format a millisecond duration using the largest whole unit."""
    if duration_ms > DAY_MS:
        return f"{duration_ms / DAY_MS:.2f} days"
    elif duration_ms > HOUR_MS:
        return f"{duration_ms / HOUR_MS:.2f} hours"
    elif duration_ms > MINUTE_MS:
        return f"{duration_ms / MINUTE_MS:.2f} minutes"
    elif duration_ms > SECOND_MS:
        return f"{duration_ms / SECOND_MS:.2f} seconds"
    return f"{duration_ms} milliseconds"


def human_time(timestamp_ms: int) -> str:
    """Format a unix timestamp (milliseconds) as a UTC ISO-8601 string."""
    try:
        moment = datetime.fromtimestamp(timestamp_ms // 1000, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return ""
    return moment.strftime("%Y-%m-%dT%H:%M:%S") + ".0Z"


def human_bytes_base_1k(size_bytes: int) -> str:
    """Format a byte count with decimal (1000-based) units, as the JVM reports RAM."""
    base = 1000
    if size_bytes > base**4:
        return f"{size_bytes / base**4:.2f} tb"
    elif size_bytes > base**3:
        return f"{size_bytes / base**3:.2f} gb"
    elif size_bytes > base**2:
        return f"{size_bytes / base**2:.2f} mb"
    elif size_bytes > base:
        return f"{size_bytes / base:.2f} kb"
    return f"{size_bytes} bytes"
