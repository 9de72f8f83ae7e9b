"""
DynamoDB service for the ActivityLog application.

This service handles all interactions with DynamoDB for storing and retrieving
activity log entries. It provides the remote log store operations (insert,
update, delete, list newest first) with proper error handling and data
validation.

Classes:
    DynamoDBService: Service for DynamoDB operations and data persistence
"""

import os
from typing import Any, Dict, List, Optional

import boto3
from boto3.dynamodb.conditions import Key
from botocore.exceptions import ClientError

from ..exceptions import RemoteSubmissionError
from ..models.activity_log import ActivityLogEntry

USER_INDEX_NAME = "UserCreatedAtIndex"
UPDATABLE_FIELDS = ("activity_type", "time_elapsed")


class DynamoDBService:
    """
    Service for managing ActivityLog entries in DynamoDB.

    The table is keyed by entry `id`, with a global secondary index
    (`user_id` hash, `created_at` range) used to list a user's entries in
    reverse chronological order.

    Attributes:
        table_name: Name of the DynamoDB table
        dynamodb: Boto3 DynamoDB resource
        table: DynamoDB table resource

    Example:
        >>> db_service = DynamoDBService()
        >>> entry = ActivityLogEntry(...)
        >>> db_service.insert_entry(entry)
        >>> retrieved = db_service.get_entry(entry.id)
    """

    def __init__(self, table_name: Optional[str] = None):
        """
        Initialize the DynamoDB service.

        Args:
            table_name: Optional table name override, uses env var if not provided

        Raises:
            ValueError: If table name is not provided and not in environment,
                or the table does not exist
            NoCredentialsError: If AWS credentials are not configured
        """
        self.table_name = table_name or os.getenv("ACTIVITY_LOGS_TABLE")

        if not self.table_name:
            raise ValueError(
                "Table name must be provided either as parameter or ACTIVITY_LOGS_TABLE environment variable"
            )

        try:
            self.dynamodb = boto3.resource("dynamodb")
            self.table = self.dynamodb.Table(self.table_name)

            # Verify table exists by getting its description
            self.table.load()

        except ClientError as e:
            if e.response["Error"]["Code"] == "ResourceNotFoundException":
                raise ValueError(f"DynamoDB table '{self.table_name}' not found")
            raise

    def insert_entry(self, entry: ActivityLogEntry) -> ActivityLogEntry:
        """
        Insert a log entry.

        Args:
            entry: Entry to store

        Returns:
            The stored entry

        Raises:
            RemoteSubmissionError: If DynamoDB rejects the write or cannot be reached
        """
        try:
            self.table.put_item(
                Item=entry.to_dynamodb_item(),
                ConditionExpression="attribute_not_exists(id)",
            )
            return entry

        except ClientError as e:
            print(f"Error saving log entry {entry.id}: {e}")
            raise RemoteSubmissionError(
                f"Failed to save log entry {entry.id}: {e}", entry=entry
            ) from e
        except Exception as e:
            print(f"Unexpected error saving log entry {entry.id}: {e}")
            raise RemoteSubmissionError(
                f"Failed to save log entry {entry.id}: {e}", entry=entry
            ) from e

    def get_entry(self, entry_id: str) -> Optional[ActivityLogEntry]:
        """
        Retrieve a log entry by ID.

        Args:
            entry_id: Unique entry identifier

        Returns:
            ActivityLogEntry if found, None otherwise
        """
        try:
            response = self.table.get_item(Key={"id": entry_id})

            if "Item" in response:
                return ActivityLogEntry.from_dynamodb_item(response["Item"])

            return None

        except ClientError as e:
            print(f"Error retrieving log entry {entry_id}: {e}")
            return None
        except Exception as e:
            print(f"Unexpected error retrieving log entry {entry_id}: {e}")
            return None

    def update_entry(
        self, entry_id: str, fields: Dict[str, Any]
    ) -> Optional[ActivityLogEntry]:
        """
        Update fields of an existing log entry.

        Only `activity_type` and `time_elapsed` may be changed.

        Args:
            entry_id: ID of the entry to update
            fields: Mapping of field name to new value

        Returns:
            The updated entry, or None if no entry has this ID

        Raises:
            ValueError: If fields is empty or names a field that cannot be updated
            RemoteSubmissionError: If DynamoDB rejects the update or cannot be reached
        """
        if not fields:
            raise ValueError("At least one field must be provided for update")

        invalid = [name for name in fields if name not in UPDATABLE_FIELDS]
        if invalid:
            raise ValueError(f"Fields cannot be updated: {', '.join(invalid)}")

        names = {f"#{name}": name for name in fields}
        values = {f":{name}": value for name, value in fields.items()}
        update_expression = "SET " + ", ".join(f"#{name} = :{name}" for name in fields)

        try:
            response = self.table.update_item(
                Key={"id": entry_id},
                UpdateExpression=update_expression,
                ExpressionAttributeNames=names,
                ExpressionAttributeValues=values,
                ConditionExpression="attribute_exists(id)",
                ReturnValues="ALL_NEW",
            )
            return ActivityLogEntry.from_dynamodb_item(response["Attributes"])

        except ClientError as e:
            if e.response["Error"]["Code"] == "ConditionalCheckFailedException":
                return None
            print(f"Error updating log entry {entry_id}: {e}")
            raise RemoteSubmissionError(f"Failed to update log entry {entry_id}: {e}") from e
        except Exception as e:
            print(f"Unexpected error updating log entry {entry_id}: {e}")
            raise RemoteSubmissionError(f"Failed to update log entry {entry_id}: {e}") from e

    def delete_entry(self, entry_id: str) -> bool:
        """
        Delete a log entry.

        Args:
            entry_id: ID of entry to delete

        Returns:
            True if the entry existed and was deleted, False if it did not exist

        Raises:
            RemoteSubmissionError: If DynamoDB rejects the delete or cannot be reached
        """
        try:
            response = self.table.delete_item(
                Key={"id": entry_id}, ReturnValues="ALL_OLD"
            )

            # Check if item existed and was deleted
            return "Attributes" in response

        except ClientError as e:
            print(f"Error deleting log entry {entry_id}: {e}")
            raise RemoteSubmissionError(f"Failed to delete log entry {entry_id}: {e}") from e
        except Exception as e:
            print(f"Unexpected error deleting log entry {entry_id}: {e}")
            raise RemoteSubmissionError(f"Failed to delete log entry {entry_id}: {e}") from e

    def list_entries(
        self, user_id: Optional[str] = None, limit: int = 50
    ) -> List[ActivityLogEntry]:
        """
        List log entries, newest first.

        With a user_id the GSI is queried in reverse order; without one the
        table is scanned and sorted by `created_at`.

        Args:
            user_id: Optional owner filter
            limit: Maximum number of entries to return

        Returns:
            List of ActivityLogEntry objects ordered by created_at descending
        """
        try:
            if user_id:
                response = self.table.query(
                    IndexName=USER_INDEX_NAME,
                    KeyConditionExpression=Key("user_id").eq(user_id),
                    ScanIndexForward=False,  # Reverse order (newest first)
                    Limit=limit,
                )
                items = response.get("Items", [])
            else:
                items = []
                scan_kwargs: Dict[str, Any] = {}
                while True:
                    response = self.table.scan(**scan_kwargs)
                    items.extend(response.get("Items", []))
                    if "LastEvaluatedKey" not in response:
                        break
                    scan_kwargs["ExclusiveStartKey"] = response["LastEvaluatedKey"]

            entries = []
            for item in items:
                try:
                    entries.append(ActivityLogEntry.from_dynamodb_item(item))
                except Exception as e:
                    print(f"Error converting item to ActivityLogEntry: {e}")
                    continue

            entries.sort(key=lambda entry: entry.created_at, reverse=True)
            return entries[:limit]

        except ClientError as e:
            print(f"Error listing log entries: {e}")
            return []
        except Exception as e:
            print(f"Unexpected error listing log entries: {e}")
            return []

    def health_check(self) -> Dict[str, Any]:
        """
        Perform a health check on the DynamoDB service.

        Returns:
            Dictionary with health check results
        """
        try:
            table_description = self.table.meta.client.describe_table(
                TableName=self.table_name
            )

            return {
                "status": "healthy",
                "table_name": self.table_name,
                "table_status": table_description["Table"]["TableStatus"],
                "item_count": table_description["Table"].get("ItemCount", "unknown"),
                "region": self.dynamodb.meta.client.meta.region_name,
            }

        except Exception as e:
            return {
                "status": "unhealthy",
                "error": str(e),
                "table_name": self.table_name,
            }
