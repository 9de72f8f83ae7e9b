"""
Data models for the ActivityLog application.

This module contains Pydantic models for data validation and serialization
used throughout the application for the stopwatch state and the activity
log records.

Classes:
    ActivityLogEntry: Model representing a logged activity session
    TimerState: Model representing the durable stopwatch state
    TimerStatus: Enum of stopwatch states
"""

from .activity_log import ActivityLogEntry
from .timer_state import TimerState, TimerStatus

__all__ = ["ActivityLogEntry", "TimerState", "TimerStatus"]
