"""
Utility functions and helpers for the ActivityLog application.

This module contains shared helpers used across the application: the
wall clock in epoch milliseconds, duration formatting for log review, and
structured log output.

Functions:
    now_epoch_millis: Current wall-clock time in milliseconds since epoch
    format_time: Format seconds as HH:MM:SS
    parse_time: Parse HH:MM:SS into seconds
    log_event: Print a structured JSON log line
"""

import json
import time
from datetime import datetime, timezone
from typing import Any

__version__ = "0.1.0"


def now_epoch_millis() -> int:
    """Return the current wall-clock time in milliseconds since the epoch."""
    return int(time.time() * 1000)


def format_time(seconds: int) -> str:
    """
    Format a duration in seconds as HH:MM:SS.

    Hours are not wrapped at 24, so long sessions stay readable.

    Args:
        seconds: Duration in whole seconds

    Returns:
        Zero-padded HH:MM:SS string

    Example:
        >>> format_time(3725)
        '01:02:05'
    """
    seconds = max(0, int(seconds))
    hours, remainder = divmod(seconds, 3600)
    minutes, secs = divmod(remainder, 60)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"


def parse_time(hhmmss: str) -> int:
    """
    Convert an HH:MM:SS string into total seconds.

    Args:
        hhmmss: Duration string such as "01:02:05"

    Returns:
        Total number of seconds

    Raises:
        ValueError: If the string is not three colon-separated non-negative
            integers, or minutes/seconds are out of range
    """
    parts = hhmmss.strip().split(":")
    if len(parts) != 3 or not all(p.isdigit() for p in parts):
        raise ValueError(f"Invalid duration '{hhmmss}', expected HH:MM:SS")

    hours, minutes, secs = (int(p) for p in parts)
    if minutes > 59 or secs > 59:
        raise ValueError(f"Invalid duration '{hhmmss}', minutes and seconds must be < 60")

    return hours * 3600 + minutes * 60 + secs


def log_event(event: str, **fields: Any) -> None:
    """
    Print a structured log line for monitoring.

    Args:
        event: Event name, e.g. TIMER_STARTED
        **fields: Additional context to include in the log line
    """
    try:
        log_data = {
            "event": event,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            **fields,
        }
        print(json.dumps(log_data, default=str))

    except Exception as e:
        print(f"Error logging event {event}: {e}")
