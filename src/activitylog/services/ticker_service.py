"""
Periodic tick scheduling for the ActivityLog stopwatch.

The stopwatch refreshes its displayed value roughly once per second through a
cancellable repeating callback. Schedulers are plain callables returning a
handle with a cancel() method, so tests can substitute a manual scheduler.

Classes:
    TickHandle: Protocol for a cancellable scheduled callback
    RepeatingTicker: Daemon thread invoking a callback at a fixed interval

Functions:
    threading_scheduler: Default scheduler backed by RepeatingTicker
"""

import threading
from typing import Callable, Protocol


class TickHandle(Protocol):
    """Handle of an armed periodic callback."""

    def cancel(self) -> None: ...


Scheduler = Callable[[float, Callable[[], None]], TickHandle]


class RepeatingTicker(threading.Thread):
    """
    Invoke a callback every `interval` seconds until cancelled.

    The thread waits on an Event, so cancel() takes effect immediately
    instead of after the current interval. Exceptions raised by the callback
    are printed and do not stop the ticker.

    Attributes:
        interval: Seconds between callbacks
        callback: Function invoked on each tick
    """

    def __init__(self, interval: float, callback: Callable[[], None]):
        super().__init__(daemon=True, name="activitylog-ticker")
        self.interval = interval
        self.callback = callback
        self._cancelled = threading.Event()

    def run(self) -> None:
        while not self._cancelled.wait(self.interval):
            try:
                self.callback()
            except Exception as e:
                print(f"Error in tick callback: {e}")

    def cancel(self) -> None:
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()


def threading_scheduler(interval: float, callback: Callable[[], None]) -> TickHandle:
    """Start a RepeatingTicker and return it as the tick handle."""
    ticker = RepeatingTicker(interval, callback)
    ticker.start()
    return ticker
