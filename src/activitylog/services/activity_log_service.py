"""
Activity log service for the ActivityLog application.

This service contains the business logic for managing activity log entries.
It builds validated entries from finished stopwatch sessions, submits them to
the remote store, and backs the review screens (listing, editing and deleting
past entries, and offering recently used activity names).

Classes:
    ActivityLogService: Core business logic service for activity log entries
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Union

from ..models.activity_log import ActivityLogEntry
from ..utils import log_event, parse_time
from .dynamodb_service import DynamoDBService


class ActivityLogService:
    """
    Core business logic service for activity log entries.

    Attributes:
        db_service: DynamoDB service acting as the remote log store

    Example:
        >>> log_service = ActivityLogService()
        >>> entry = log_service.submit_entry("Reading", 2700, "user-123")
        >>> log_service.update_entry(entry.id, time_elapsed="00:50:00")
    """

    def __init__(self, db_service: Optional[DynamoDBService] = None):
        """
        Initialize the activity log service.

        Args:
            db_service: Optional DynamoDB service instance, created from the
                environment if not provided
        """
        self.db_service = db_service or DynamoDBService()

    def submit_entry(
        self,
        activity_type: str,
        time_elapsed: int,
        user_id: str,
        created_at: Optional[datetime] = None,
    ) -> ActivityLogEntry:
        """
        Record a finished session in the remote log store.

        Args:
            activity_type: Name of the logged activity
            time_elapsed: Session duration in seconds
            user_id: Owning user
            created_at: Optional creation time, defaults to now (UTC)

        Returns:
            The stored ActivityLogEntry

        Raises:
            pydantic.ValidationError: If the entry data is invalid
            RemoteSubmissionError: If the remote store rejects the entry
        """
        entry = ActivityLogEntry(
            activity_type=activity_type,
            time_elapsed=time_elapsed,
            user_id=user_id,
            created_at=created_at or datetime.now(timezone.utc),
        )

        self.db_service.insert_entry(entry)
        log_event(
            "LOG_ENTRY_SUBMITTED",
            entryId=entry.id,
            activityType=entry.activity_type,
            timeElapsed=entry.time_elapsed,
        )
        return entry

    def retry_submission(self, entry: ActivityLogEntry) -> ActivityLogEntry:
        """
        Submit an entry whose earlier submission failed.

        Args:
            entry: Entry carried by a RemoteSubmissionError

        Returns:
            The stored entry

        Raises:
            RemoteSubmissionError: If the remote store rejects the entry again
        """
        self.db_service.insert_entry(entry)
        log_event("LOG_ENTRY_RESUBMITTED", entryId=entry.id)
        return entry

    def get_entry(self, entry_id: str) -> Optional[ActivityLogEntry]:
        return self.db_service.get_entry(entry_id)

    def list_entries(
        self, user_id: Optional[str] = None, limit: int = 50
    ) -> List[ActivityLogEntry]:
        """
        List past entries, newest first.

        Args:
            user_id: Optional owner filter
            limit: Maximum number of entries to return

        Returns:
            List of ActivityLogEntry objects
        """
        return self.db_service.list_entries(user_id=user_id, limit=limit)

    def update_entry(
        self,
        entry_id: str,
        activity_type: Optional[str] = None,
        time_elapsed: Optional[Union[int, str]] = None,
    ) -> Optional[ActivityLogEntry]:
        """
        Edit the activity name and/or duration of an entry.

        Durations may be given in seconds or as HH:MM:SS, which is how the
        review screen displays them.

        Args:
            entry_id: ID of the entry to edit
            activity_type: Optional new activity name
            time_elapsed: Optional new duration

        Returns:
            The updated entry, or None if the entry does not exist

        Raises:
            ValueError: If nothing is being updated or a value is invalid
            RemoteSubmissionError: If the remote store rejects the update
        """
        fields: Dict[str, Any] = {}

        if activity_type is not None:
            activity_type = activity_type.strip()
            if not activity_type or len(activity_type) > 100:
                raise ValueError("Activity type must be between 1 and 100 characters")
            fields["activity_type"] = activity_type

        if time_elapsed is not None:
            if isinstance(time_elapsed, str) and ":" in time_elapsed:
                seconds = parse_time(time_elapsed)
            else:
                seconds = int(time_elapsed)
            if seconds < 0:
                raise ValueError("Time elapsed must not be negative")
            fields["time_elapsed"] = seconds

        if not fields:
            raise ValueError("Nothing to update: provide activity_type or time_elapsed")

        updated = self.db_service.update_entry(entry_id, fields)
        if updated:
            log_event("LOG_ENTRY_UPDATED", entryId=entry_id, fields=sorted(fields))
        return updated

    def delete_entry(self, entry_id: str) -> bool:
        """
        Delete an entry.

        Returns:
            True if the entry existed and was deleted

        Raises:
            RemoteSubmissionError: If the remote store rejects the delete
        """
        deleted = self.db_service.delete_entry(entry_id)
        if deleted:
            log_event("LOG_ENTRY_DELETED", entryId=entry_id)
        return deleted

    def get_recent_activity_types(
        self, user_id: Optional[str] = None, limit: int = 200
    ) -> List[str]:
        """
        Get the distinct activity names, most recently used first.

        Used to offer previously logged activities when starting a session.

        Args:
            user_id: Optional owner filter
            limit: Number of recent entries to consider

        Returns:
            List of unique activity names in order of last use
        """
        seen: Dict[str, None] = {}
        for entry in self.db_service.list_entries(user_id=user_id, limit=limit):
            if entry.activity_type not in seen:
                seen[entry.activity_type] = None
        return list(seen)

    def health_check(self) -> Dict[str, Any]:
        """
        Perform a health check of the service and its remote store.

        Returns:
            Dictionary with health check results
        """
        health_status = {
            "status": "healthy",
            "services": {},
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

        try:
            db_health = self.db_service.health_check()
            health_status["services"]["database"] = db_health

            if db_health["status"] != "healthy":
                health_status["status"] = "degraded"

        except Exception as e:
            health_status["status"] = "unhealthy"
            health_status["error"] = str(e)

        return health_status
