"""
Logging session service for the ActivityLog application.

A logging session ties one activity to one durable stopwatch for the
authenticated user. It forwards app lifecycle changes to the stopwatch and,
when the user ends the session, submits the elapsed time as a log entry.

Classes:
    SessionProvider: Protocol for the source of the authenticated user
    StaticSessionProvider: Session provider holding a fixed user ID
    LoggingSession: One activity timing flow from start to submission
"""

from typing import Callable, Optional, Protocol

from ..exceptions import AuthenticationRequiredError, RemoteSubmissionError
from ..models.activity_log import ActivityLogEntry
from ..models.timer_state import TimerStatus
from ..utils import log_event
from .activity_log_service import ActivityLogService
from .local_store_service import FileKeyValueStore, KeyValueStore, TimerStore
from .stopwatch_service import DurableStopwatch

APP_STATE_ACTIVE = "active"


class SessionProvider(Protocol):
    """Supplies the currently authenticated user, or None when signed out."""

    @property
    def user_id(self) -> Optional[str]: ...


class StaticSessionProvider:
    """Session provider for a fixed user, e.g. one resolved at sign-in."""

    def __init__(self, user_id: Optional[str] = None):
        self._user_id = user_id

    @property
    def user_id(self) -> Optional[str]:
        return self._user_id

    def sign_out(self) -> None:
        self._user_id = None


class LoggingSession:
    """
    Time one activity for the authenticated user and log the result.

    The stopwatch's stored keys are namespaced by user and activity, so
    concurrent flows sharing one local store stay independent.

    Attributes:
        activity_type: Name of the activity being timed
        session_provider: Source of the authenticated user
        log_service: Service used to submit the finished entry
        stopwatch: Durable stopwatch measuring the session

    Example:
        >>> session = LoggingSession("Reading", StaticSessionProvider("user-1"), log_service)
        >>> session.start()
        >>> session.handle_app_state("active")
        >>> entry = session.finish()
    """

    def __init__(
        self,
        activity_type: str,
        session_provider: SessionProvider,
        log_service: ActivityLogService,
        store: Optional[KeyValueStore] = None,
        stopwatch: Optional[DurableStopwatch] = None,
        on_tick: Optional[Callable[[int], None]] = None,
    ):
        """
        Initialize the logging session.

        Args:
            activity_type: Name of the activity to time
            session_provider: Source of the authenticated user
            log_service: Service used to submit the finished entry
            store: Optional local store, a FileKeyValueStore by default
            stopwatch: Optional preconfigured stopwatch
            on_tick: Optional display callback for the default stopwatch

        Raises:
            AuthenticationRequiredError: If no user is signed in
            ValueError: If activity_type is empty
        """
        user_id = self._require_user(session_provider, "start a logging session")

        activity_type = activity_type.strip()
        if not activity_type:
            raise ValueError("Activity type must not be empty")

        self.activity_type = activity_type
        self.session_provider = session_provider
        self.log_service = log_service

        if stopwatch is None:
            timer_store = TimerStore(
                store if store is not None else FileKeyValueStore(),
                namespace=f"{user_id}:{activity_type}",
            )
            stopwatch = DurableStopwatch(timer_store, on_tick=on_tick)
        self.stopwatch = stopwatch

    @staticmethod
    def _require_user(session_provider: SessionProvider, operation: str) -> str:
        user_id = session_provider.user_id
        if not user_id:
            raise AuthenticationRequiredError(f"A signed-in user is required to {operation}")
        return user_id

    @property
    def status(self) -> TimerStatus:
        return self.stopwatch.status

    def elapsed_seconds(self) -> int:
        return self.stopwatch.current_elapsed_seconds()

    def start(self) -> None:
        """
        Start or resume timing.

        Raises:
            AuthenticationRequiredError: If the user signed out
        """
        self._require_user(self.session_provider, "start timing")
        if self.stopwatch.status == TimerStatus.PAUSED:
            self.stopwatch.resume()
        else:
            self.stopwatch.start()

    def pause(self) -> None:
        self.stopwatch.pause()

    def resume(self) -> None:
        self.stopwatch.resume()

    def handle_app_state(self, app_state: str) -> None:
        """
        React to an app lifecycle change.

        Only the transition to "active" matters: the stopwatch reconciles
        its elapsed time, recovering from the local store if needed.
        """
        if app_state == APP_STATE_ACTIVE:
            self.stopwatch.reconcile_on_foreground()

    def finish(self) -> Optional[ActivityLogEntry]:
        """
        End the session and submit the elapsed time.

        The stopwatch is reset and its stored keys are cleared before the
        submission, so a submission failure does not keep the timer alive.
        Nothing is submitted when no time was recorded.

        Returns:
            The stored entry, or None when there was nothing to submit

        Raises:
            AuthenticationRequiredError: If the user signed out; the timer is
                left untouched
            RemoteSubmissionError: If the remote store rejected the entry;
                the unsent entry is available as `error.entry`
        """
        user_id = self._require_user(self.session_provider, "finish a logging session")

        final_seconds = self.stopwatch.stop()
        if final_seconds <= 0:
            return None

        try:
            return self.log_service.submit_entry(
                activity_type=self.activity_type,
                time_elapsed=final_seconds,
                user_id=user_id,
            )
        except RemoteSubmissionError as e:
            log_event(
                "LOG_SUBMISSION_FAILED",
                activityType=self.activity_type,
                timeElapsed=final_seconds,
                error=str(e),
            )
            raise

    def close(self) -> None:
        """Abandon the session, cancelling any live tick callback."""
        self.stopwatch.close()
