"""
Exception types for the ActivityLog application.

Classes:
    ActivityLogError: Base exception for the package
    PersistenceError: Local durable store read/write failure
    RemoteSubmissionError: Remote log store rejected or could not be reached
    PreconditionError: Operation invoked in a state that does not allow it
    AuthenticationRequiredError: No authenticated user for a session operation
"""

from typing import Any, Optional


class ActivityLogError(Exception):
    """Base exception for ActivityLog errors."""


class PersistenceError(ActivityLogError):
    """Raised when the local durable store cannot be read or written."""


class RemoteSubmissionError(ActivityLogError):
    """
    Raised when an insert, update or delete against the remote log store fails.

    Attributes:
        entry: The log entry that could not be written, if any, so the caller
            can retry the submission
    """

    def __init__(self, message: str, entry: Optional[Any] = None):
        super().__init__(message)
        self.entry = entry


class PreconditionError(ActivityLogError):
    """Raised when a timer operation is invoked in an invalid state."""


class AuthenticationRequiredError(ActivityLogError):
    """Raised when a logging session operation has no authenticated user."""
