"""
Activity log data model for the ActivityLog application.

This module defines the ActivityLogEntry model used to represent and validate
finished logging sessions. Entries are created when a stopwatch session ends
and are stored in DynamoDB, where they can later be reviewed, edited and
deleted.

Classes:
    ActivityLogEntry: Pydantic model for one logged activity session
"""

import uuid
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..utils import parse_time


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ActivityLogEntry(BaseModel):
    """
    Pydantic model representing a logged activity session.

    This model handles validation and serialization of log records. It
    includes automatic ID and timestamp generation and accepts durations
    either as whole seconds or as HH:MM:SS strings from the review screen.

    Attributes:
        id: Unique identifier for the entry (auto-generated)
        activity_type: Name of the activity, as chosen by the user
        time_elapsed: Duration of the session in seconds
        user_id: Identifier of the user who owns the entry
        created_at: When the entry was recorded (auto-generated, UTC)

    Example:
        >>> entry = ActivityLogEntry(
        ...     activity_type="Reading",
        ...     time_elapsed="00:45:00",
        ...     user_id="user-123",
        ... )
        >>> entry.time_elapsed
        2700
    """

    model_config = ConfigDict(validate_assignment=True)

    id: str = Field(
        default="", validate_default=True, description="Unique log entry identifier"
    )
    activity_type: str = Field(
        ..., min_length=1, max_length=100, description="Activity name"
    )
    time_elapsed: int = Field(..., ge=0, description="Elapsed time in seconds")
    user_id: str = Field(..., min_length=1, description="Owning user identifier")
    created_at: datetime = Field(
        default_factory=_utcnow, description="Entry creation timestamp"
    )

    @field_validator("id", mode="before")
    @classmethod
    def generate_id(cls, v: Any) -> str:
        """
        Generate a unique ID for the entry if not provided.

        Creates an ID in the format: log_YYYY_MM_DD_HH_MM_SS_hex

        Args:
            v: Current ID value (may be empty or None)

        Returns:
            Generated or existing entry ID
        """
        if v:
            return str(v)

        timestamp_str = _utcnow().strftime("%Y_%m_%d_%H_%M_%S")
        return f"log_{timestamp_str}_{uuid.uuid4().hex[:8]}"

    @field_validator("activity_type", mode="before")
    @classmethod
    def strip_activity_type(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip()
        return v

    @field_validator("time_elapsed", mode="before")
    @classmethod
    def coerce_time_elapsed(cls, v: Any) -> Any:
        """
        Accept durations as seconds, Decimal or HH:MM:SS.

        Raises:
            ValueError: If a string duration is not valid HH:MM:SS
        """
        if isinstance(v, Decimal):
            return int(v)
        if isinstance(v, str) and ":" in v:
            return parse_time(v)
        return v

    @field_validator("created_at")
    @classmethod
    def ensure_timezone(cls, v: datetime) -> datetime:
        # Naive timestamps are taken to be UTC; stored keys sort as UTC strings
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v.astimezone(timezone.utc)

    def to_dynamodb_item(self) -> Dict[str, Any]:
        """
        Convert the entry to a DynamoDB item format.

        Returns:
            Dictionary representation for DynamoDB
        """
        item = self.model_dump()
        item["created_at"] = self.created_at.isoformat()
        return item

    @classmethod
    def from_dynamodb_item(cls, item: Dict[str, Any]) -> "ActivityLogEntry":
        """
        Create an ActivityLogEntry from a DynamoDB item.

        Args:
            item: DynamoDB item dictionary

        Returns:
            ActivityLogEntry instance
        """
        data = dict(item)
        if "created_at" in data and isinstance(data["created_at"], str):
            data["created_at"] = datetime.fromisoformat(data["created_at"])

        return cls(**data)
