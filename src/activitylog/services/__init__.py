"""
Service layer for the ActivityLog application.

This module contains the business logic and storage integrations used
throughout the application: the durable stopwatch and its local store, the
tick scheduler, the DynamoDB-backed remote log store, and the logging session
that ties them together.

Classes:
    ActivityLogService: Business logic for activity log entries
    DynamoDBService: DynamoDB integration for remote log storage
    DurableStopwatch: Stopwatch that survives suspension and restarts
    FileKeyValueStore: JSON file backed local key-value store
    InMemoryKeyValueStore: Process-local key-value store
    TimerStore: Namespaced timer keys in a local key-value store
    LoggingSession: One activity timing flow from start to submission
    StaticSessionProvider: Session provider for a fixed user
    RepeatingTicker: Cancellable periodic callback thread
"""

from .activity_log_service import ActivityLogService
from .dynamodb_service import DynamoDBService
from .local_store_service import FileKeyValueStore, InMemoryKeyValueStore, TimerStore
from .session_service import LoggingSession, StaticSessionProvider
from .stopwatch_service import DurableStopwatch
from .ticker_service import RepeatingTicker

__all__ = [
    "ActivityLogService",
    "DynamoDBService",
    "DurableStopwatch",
    "FileKeyValueStore",
    "InMemoryKeyValueStore",
    "TimerStore",
    "LoggingSession",
    "StaticSessionProvider",
    "RepeatingTicker",
]
