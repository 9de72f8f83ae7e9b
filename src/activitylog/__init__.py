"""
ActivityLog: Personal activity logging with a durable stopwatch.

This package times activities with a stopwatch that survives app
backgrounding and process restarts, then records each finished session as a
log entry in DynamoDB where it can be reviewed, edited and deleted.

Modules:
    lambdas: AWS Lambda function handlers for the log entry API
    services: Stopwatch, local and remote storage, and session logic
    models: Data models and validation using Pydantic
    utils: Utility functions and helpers
    exceptions: Error types raised by the services
"""

__version__ = "0.1.0"

from .exceptions import (
    ActivityLogError,
    AuthenticationRequiredError,
    PersistenceError,
    PreconditionError,
    RemoteSubmissionError,
)
from .models import ActivityLogEntry, TimerState, TimerStatus
from .services import (
    ActivityLogService,
    DurableStopwatch,
    DynamoDBService,
    LoggingSession,
    StaticSessionProvider,
    TimerStore,
)

__all__ = [
    "ActivityLogEntry",
    "TimerState",
    "TimerStatus",
    "ActivityLogService",
    "DurableStopwatch",
    "DynamoDBService",
    "LoggingSession",
    "StaticSessionProvider",
    "TimerStore",
    "ActivityLogError",
    "AuthenticationRequiredError",
    "PersistenceError",
    "PreconditionError",
    "RemoteSubmissionError",
]
