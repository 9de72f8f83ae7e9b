"""
Timer state model for the ActivityLog application.

This module defines the state held by the durable stopwatch. States are
immutable: every transition builds a new, validated TimerState so that an
instance violating the running/anchor invariant can never be observed.

Classes:
    TimerStatus: Enum of stopwatch states
    TimerState: Pydantic model for the stopwatch state
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class TimerStatus(str, Enum):
    """
    Enumeration of stopwatch states.

    IDLE means never started or fully reset, RUNNING means a run segment is
    open, PAUSED means stopped with accumulated time retained.
    """

    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"


class TimerState(BaseModel):
    """
    Pydantic model representing the stopwatch state.

    Attributes:
        accumulated_seconds: Seconds accrued across completed run segments
        run_anchor_epoch_millis: Wall-clock ms at which the open run segment
            began; set only while running
        status: Current TimerStatus

    Example:
        >>> state = TimerState.idle()
        >>> state.start(1_700_000_000_000).status
        <TimerStatus.RUNNING: 'running'>
    """

    model_config = ConfigDict(frozen=True)

    accumulated_seconds: int = Field(default=0, ge=0, description="Completed segment seconds")
    run_anchor_epoch_millis: Optional[int] = Field(
        default=None, description="Start of the open run segment (epoch ms)"
    )
    status: TimerStatus = Field(default=TimerStatus.IDLE, description="Timer status")

    @model_validator(mode="after")
    def check_anchor_matches_status(self) -> "TimerState":
        """
        Enforce the running/anchor invariant.

        Raises:
            ValueError: If the anchor is set without RUNNING (or missing with
                it), or an IDLE state carries accumulated time
        """
        running = self.status == TimerStatus.RUNNING
        if running != (self.run_anchor_epoch_millis is not None):
            raise ValueError("run_anchor_epoch_millis must be set exactly when running")
        if self.status == TimerStatus.IDLE and self.accumulated_seconds != 0:
            raise ValueError("An idle timer cannot carry accumulated seconds")
        return self

    @classmethod
    def idle(cls) -> "TimerState":
        return cls()

    @property
    def is_running(self) -> bool:
        return self.status == TimerStatus.RUNNING

    def segment_seconds(self, now_millis: int) -> int:
        """
        Whole seconds elapsed in the open run segment.

        A clock that moved backwards past the anchor yields 0, never a
        negative value.

        Args:
            now_millis: Current wall-clock time in epoch ms

        Returns:
            Elapsed seconds of the open segment, or 0 when not running
        """
        if self.run_anchor_epoch_millis is None:
            return 0
        return max(0, (now_millis - self.run_anchor_epoch_millis) // 1000)

    def elapsed_seconds(self, now_millis: int) -> int:
        """Total elapsed seconds at now_millis."""
        return self.accumulated_seconds + self.segment_seconds(now_millis)

    def start(self, now_millis: int) -> "TimerState":
        """Open a run segment anchored at now_millis."""
        return TimerState(
            accumulated_seconds=self.accumulated_seconds,
            run_anchor_epoch_millis=now_millis,
            status=TimerStatus.RUNNING,
        )

    def pause(self, now_millis: int) -> "TimerState":
        """Close the open run segment, folding it into accumulated_seconds."""
        # The delta is computed from the anchor before it is dropped.
        return TimerState(
            accumulated_seconds=self.elapsed_seconds(now_millis),
            run_anchor_epoch_millis=None,
            status=TimerStatus.PAUSED,
        )
