"""
Durable stopwatch service for the ActivityLog application.

The stopwatch measures how long an activity has been running across
pause/resume cycles, app backgrounding and process restarts. Elapsed time is
always derived from a wall-clock anchor plus accumulated seconds; the
periodic tick only refreshes the displayed value.

Classes:
    DurableStopwatch: Stopwatch backed by a TimerStore shadow copy
"""

from typing import Callable, Optional

from ..exceptions import PersistenceError, PreconditionError
from ..models.timer_state import TimerState, TimerStatus
from ..utils import log_event, now_epoch_millis
from .local_store_service import TimerStore
from .ticker_service import Scheduler, TickHandle, threading_scheduler


class DurableStopwatch:
    """
    Stopwatch whose elapsed time survives suspension and restarts.

    Every transition computes a new TimerState, swaps it in, then writes the
    shadow copy to the TimerStore. When the store fails the in-memory state
    is kept and the instance is flagged degraded; a degraded stopwatch no
    longer trusts the store for recovery.

    Attributes:
        timer_store: Shadow copy of the state in local durable storage
        clock: Returns the current wall-clock time in epoch ms
        scheduler: Arms the periodic tick callback
        tick_interval: Seconds between ticks
        on_tick: Optional callback receiving the displayed seconds
        degraded: True once a store operation has failed
        displayed_seconds: Last value published by tick or reconciliation

    Example:
        >>> stopwatch = DurableStopwatch(TimerStore(InMemoryKeyValueStore()))
        >>> stopwatch.start()
        >>> stopwatch.pause()
        >>> seconds = stopwatch.stop()
    """

    def __init__(
        self,
        timer_store: TimerStore,
        clock: Callable[[], int] = now_epoch_millis,
        scheduler: Scheduler = threading_scheduler,
        tick_interval: float = 1.0,
        on_tick: Optional[Callable[[int], None]] = None,
    ):
        self.timer_store = timer_store
        self.clock = clock
        self.scheduler = scheduler
        self.tick_interval = tick_interval
        self.on_tick = on_tick

        self.degraded = False
        self.displayed_seconds = 0
        self._state = TimerState.idle()
        self._tick_handle: Optional[TickHandle] = None

    @property
    def state(self) -> TimerState:
        return self._state

    @property
    def status(self) -> TimerStatus:
        return self._state.status

    @property
    def accumulated_seconds(self) -> int:
        return self._state.accumulated_seconds

    @property
    def run_anchor_epoch_millis(self) -> Optional[int]:
        return self._state.run_anchor_epoch_millis

    @property
    def is_ticking(self) -> bool:
        return self._tick_handle is not None

    def current_elapsed_seconds(self, now: Optional[int] = None) -> int:
        """
        Total elapsed seconds, computed from the anchor and accumulated time.

        Does not depend on ticks having fired and has no side effects.

        Args:
            now: Optional epoch ms to evaluate at, defaults to the clock

        Returns:
            Elapsed whole seconds
        """
        return self._state.elapsed_seconds(self.clock() if now is None else now)

    def start(self) -> None:
        """
        Open a run segment anchored at the current time.

        Starting a running stopwatch does nothing.
        """
        if self._state.is_running:
            return

        self._commit(self._state.start(self.clock()))
        self._arm_ticker()
        log_event(
            "TIMER_STARTED",
            namespace=self.timer_store.namespace,
            accumulatedSeconds=self._state.accumulated_seconds,
        )

    def resume(self) -> None:
        """Start a new run segment after a pause, keeping accumulated time."""
        try:
            self._require(TimerStatus.PAUSED, TimerStatus.RUNNING, operation="resume")
        except PreconditionError as e:
            log_event("TIMER_PRECONDITION_FAILED", operation="resume", error=str(e))
            return

        self.start()

    def pause(self) -> None:
        """Close the open run segment and keep its seconds."""
        try:
            self._require(TimerStatus.RUNNING, operation="pause")
        except PreconditionError as e:
            log_event("TIMER_PRECONDITION_FAILED", operation="pause", error=str(e))
            return

        self._disarm_ticker()
        self._commit(self._state.pause(self.clock()))
        self.displayed_seconds = self._state.accumulated_seconds
        log_event(
            "TIMER_PAUSED",
            namespace=self.timer_store.namespace,
            accumulatedSeconds=self._state.accumulated_seconds,
        )

    def stop(self) -> int:
        """
        End the session and reset to idle.

        A running segment is folded in first, so no time is lost. The stored
        shadow copy is erased.

        Returns:
            Final elapsed seconds, 0 when the stopwatch was already idle
        """
        if self._state.status == TimerStatus.IDLE:
            return 0

        self._disarm_ticker()
        final_seconds = self._state.pause(self.clock()).accumulated_seconds
        self._commit(TimerState.idle())
        self.displayed_seconds = 0
        log_event(
            "TIMER_STOPPED",
            namespace=self.timer_store.namespace,
            finalSeconds=final_seconds,
        )
        return final_seconds

    def reconcile_on_foreground(self, now: Optional[int] = None) -> int:
        """
        Recompute elapsed time after the app becomes active again.

        A running stopwatch recomputes its displayed value from the anchor,
        whatever number of ticks fired while backgrounded. An idle stopwatch
        (for example a fresh instance after the process was killed) rebuilds
        its state from the store. A degraded stopwatch skips the store and
        logs a warning instead.

        Args:
            now: Optional epoch ms to reconcile at, defaults to the clock

        Returns:
            Elapsed seconds after reconciliation
        """
        now = self.clock() if now is None else now

        if self.degraded:
            log_event(
                "TIMER_RECOVERY_UNTRUSTED",
                namespace=self.timer_store.namespace,
                status=self._state.status.value,
                message="Local store failed earlier; keeping in-memory state",
            )
        elif self._state.status == TimerStatus.IDLE:
            self._recover_from_store()

        self.displayed_seconds = self._state.elapsed_seconds(now)
        if self._state.is_running:
            self._arm_ticker()
        return self.displayed_seconds

    def tick(self) -> None:
        """Refresh the displayed elapsed value."""
        if not self._state.is_running:
            return

        self.displayed_seconds = self.current_elapsed_seconds()
        if self.on_tick:
            self.on_tick(self.displayed_seconds)

    def close(self) -> None:
        """Cancel the live tick callback when the owning session goes away."""
        self._disarm_ticker()

    def _require(self, *allowed: TimerStatus, operation: str) -> None:
        if self._state.status not in allowed:
            raise PreconditionError(
                f"Cannot {operation} a timer that is {self._state.status.value}"
            )

    def _commit(self, new_state: TimerState) -> None:
        self._state = new_state
        try:
            self.timer_store.save(new_state)
        except PersistenceError as e:
            self.degraded = True
            log_event(
                "TIMER_PERSISTENCE_FAILED",
                namespace=self.timer_store.namespace,
                status=new_state.status.value,
                error=str(e),
            )

    def _recover_from_store(self) -> None:
        try:
            recovered = self.timer_store.load()
        except PersistenceError as e:
            self.degraded = True
            log_event(
                "TIMER_RECOVERY_FAILED",
                namespace=self.timer_store.namespace,
                error=str(e),
            )
            return

        if recovered.status != TimerStatus.IDLE:
            self._state = recovered
            log_event(
                "TIMER_RECOVERED",
                namespace=self.timer_store.namespace,
                status=recovered.status.value,
                accumulatedSeconds=recovered.accumulated_seconds,
            )

    def _arm_ticker(self) -> None:
        self._disarm_ticker()
        self._tick_handle = self.scheduler(self.tick_interval, self.tick)

    def _disarm_ticker(self) -> None:
        if self._tick_handle is not None:
            self._tick_handle.cancel()
            self._tick_handle = None
