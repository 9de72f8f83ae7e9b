"""
Pytest configuration and shared fixtures for ActivityLog tests.

This module contains pytest configuration, shared fixtures, and test utilities
that are used across multiple test modules. It sets up mock AWS services,
a controllable clock and tick scheduler for the stopwatch, and sample data.

Fixtures:
    mock_dynamodb_table: Mocked DynamoDB table for testing
    dynamodb_service: DynamoDBService bound to the mocked table
    log_service: ActivityLogService bound to the mocked table
    clock: Manually advanced epoch-millis clock
    scheduler: Tick scheduler that records armed handles
    memory_store: In-memory local key-value store
    stopwatch: DurableStopwatch wired to the fixtures above
"""

import os
import pytest
from datetime import datetime, timedelta, timezone
from typing import Callable, List

import boto3
from moto import mock_aws

from src.activitylog.models.activity_log import ActivityLogEntry
from src.activitylog.services.activity_log_service import ActivityLogService
from src.activitylog.services.dynamodb_service import DynamoDBService
from src.activitylog.services.local_store_service import InMemoryKeyValueStore, TimerStore
from src.activitylog.services.session_service import StaticSessionProvider
from src.activitylog.services.stopwatch_service import DurableStopwatch


# Test configuration constants
TEST_TABLE_NAME = "test-activity-logs-table"
TEST_USER_ID = "user-123"
T0 = 1_700_000_000_000  # Fixed epoch ms used as the start of every test clock


class FakeClock:
    """Epoch-millis clock that only moves when told to."""

    def __init__(self, now: int = T0):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += int(seconds * 1000)


class FakeTickHandle:
    """Tick handle that records cancellation instead of running a thread."""

    def __init__(self, interval: float, callback: Callable[[], None]):
        self.interval = interval
        self.callback = callback
        self.cancel_count = 0

    def cancel(self) -> None:
        self.cancel_count += 1

    @property
    def live(self) -> bool:
        return self.cancel_count == 0

    def fire(self) -> None:
        self.callback()


class ManualScheduler:
    """Scheduler that hands out FakeTickHandles and keeps them for inspection."""

    def __init__(self):
        self.handles: List[FakeTickHandle] = []

    def __call__(self, interval: float, callback: Callable[[], None]) -> FakeTickHandle:
        handle = FakeTickHandle(interval, callback)
        self.handles.append(handle)
        return handle

    @property
    def live_handles(self) -> List[FakeTickHandle]:
        return [h for h in self.handles if h.live]


class FailingKeyValueStore(InMemoryKeyValueStore):
    """
    In-memory store whose writes (and optionally reads) can be made to fail.

    With fail_keys set, only operations on those keys fail, which leaves a
    record half written the way an interrupted save would.
    """

    def __init__(self, fail_writes: bool = True, fail_reads: bool = False, fail_keys=None):
        super().__init__()
        self.fail_writes = fail_writes
        self.fail_reads = fail_reads
        self.fail_keys = set(fail_keys) if fail_keys else None

    def _check(self, enabled: bool, key: str) -> None:
        if enabled and (self.fail_keys is None or key in self.fail_keys):
            raise OSError(f"storage unavailable for '{key}'")

    def get(self, key):
        self._check(self.fail_reads, key)
        return super().get(key)

    def set(self, key, value):
        self._check(self.fail_writes, key)
        super().set(key, value)

    def remove(self, key):
        self._check(self.fail_writes, key)
        super().remove(key)


@pytest.fixture(scope="session")
def aws_credentials():
    """
    Fixture to set up AWS credentials for testing.

    Sets environment variables for AWS credentials that are used by moto
    for mocking AWS services. These are fake credentials for testing only.
    """
    os.environ['AWS_ACCESS_KEY_ID'] = 'testing'
    os.environ['AWS_SECRET_ACCESS_KEY'] = 'testing'
    os.environ['AWS_SECURITY_TOKEN'] = 'testing'
    os.environ['AWS_SESSION_TOKEN'] = 'testing'
    os.environ['AWS_DEFAULT_REGION'] = 'us-east-1'


@pytest.fixture
def mock_dynamodb_table(aws_credentials):
    """
    Fixture that creates a mocked DynamoDB table for testing.

    Uses moto to create an in-memory DynamoDB table keyed by `id` with the
    UserCreatedAtIndex GSI used for listing a user's entries.

    Returns:
        boto3.resource.Table: Mocked DynamoDB table resource
    """
    with mock_aws():
        dynamodb = boto3.resource('dynamodb', region_name='us-east-1')

        table = dynamodb.create_table(
            TableName=TEST_TABLE_NAME,
            KeySchema=[
                {'AttributeName': 'id', 'KeyType': 'HASH'}
            ],
            AttributeDefinitions=[
                {'AttributeName': 'id', 'AttributeType': 'S'},
                {'AttributeName': 'user_id', 'AttributeType': 'S'},
                {'AttributeName': 'created_at', 'AttributeType': 'S'}
            ],
            GlobalSecondaryIndexes=[
                {
                    'IndexName': 'UserCreatedAtIndex',
                    'KeySchema': [
                        {'AttributeName': 'user_id', 'KeyType': 'HASH'},
                        {'AttributeName': 'created_at', 'KeyType': 'RANGE'}
                    ],
                    'Projection': {'ProjectionType': 'ALL'}
                }
            ],
            BillingMode='PAY_PER_REQUEST'
        )

        table.wait_until_exists()
        yield table


@pytest.fixture
def dynamodb_service(mock_dynamodb_table):
    """
    Fixture that provides a DynamoDBService instance for testing.

    Returns:
        DynamoDBService: Service bound to the mocked table
    """
    return DynamoDBService(table_name=TEST_TABLE_NAME)


@pytest.fixture
def log_service(dynamodb_service):
    """
    Fixture that provides an ActivityLogService backed by the mocked table.

    Returns:
        ActivityLogService: Configured service instance
    """
    return ActivityLogService(db_service=dynamodb_service)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def memory_store():
    return InMemoryKeyValueStore()


@pytest.fixture
def timer_store(memory_store):
    return TimerStore(memory_store)


@pytest.fixture
def stopwatch(timer_store, clock, scheduler):
    """
    Fixture that provides a DurableStopwatch driven by the fake clock.

    Returns:
        DurableStopwatch: Stopwatch using the in-memory store and manual scheduler
    """
    return DurableStopwatch(timer_store, clock=clock, scheduler=scheduler)


@pytest.fixture
def session_provider():
    return StaticSessionProvider(TEST_USER_ID)


@pytest.fixture
def sample_entries() -> List[ActivityLogEntry]:
    """
    Fixture that provides sample log entries an hour apart.

    The newest entry is last in the list.
    """
    base_time = datetime(2024, 1, 15, 8, 0, 0, tzinfo=timezone.utc)

    return [
        ActivityLogEntry(activity_type="Reading", time_elapsed=1800, user_id=TEST_USER_ID,
                         created_at=base_time),
        ActivityLogEntry(activity_type="Running", time_elapsed=2400, user_id=TEST_USER_ID,
                         created_at=base_time + timedelta(hours=1)),
        ActivityLogEntry(activity_type="Reading", time_elapsed=900, user_id=TEST_USER_ID,
                         created_at=base_time + timedelta(hours=2)),
        ActivityLogEntry(activity_type="Guitar", time_elapsed=600, user_id="user-456",
                         created_at=base_time + timedelta(hours=3)),
    ]


@pytest.fixture
def populated_database(dynamodb_service, sample_entries):
    """
    Fixture that populates the test database with sample entries.

    Returns:
        DynamoDBService: Database service with populated data
    """
    for entry in sample_entries:
        dynamodb_service.insert_entry(entry)

    return dynamodb_service


# Pytest configuration
def pytest_configure(config):
    """
    Pytest configuration function.

    Registers custom markers for organizing test execution.
    """
    config.addinivalue_line("markers", "unit: mark test as a unit test")
    config.addinivalue_line("markers", "integration: mark test as an integration test")
    config.addinivalue_line("markers", "slow: mark test as slow running")
    config.addinivalue_line("markers", "aws: mark test as requiring AWS services")
