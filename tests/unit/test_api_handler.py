"""
Unit tests for the API Gateway handler.

Exercises each REST route against a moto-mocked table, including CORS
preflight, validation errors and missing resources.
"""

import json

import pytest

from src.activitylog.lambdas import api_handler
from src.activitylog.lambdas.api_handler import lambda_handler
from tests.conftest import TEST_TABLE_NAME, TEST_USER_ID


def _event(method, resource, path_params=None, query_params=None, body=None):
    return {
        "httpMethod": method,
        "resource": resource,
        "pathParameters": path_params,
        "queryStringParameters": query_params,
        "body": json.dumps(body) if isinstance(body, dict) else body,
        "requestContext": {"requestId": "req-1"},
    }


def _body(response):
    return json.loads(response["body"])


@pytest.fixture
def api_table(mock_dynamodb_table, monkeypatch):
    """Point the handler at the mocked table through the environment."""
    monkeypatch.setenv("ACTIVITY_LOGS_TABLE", TEST_TABLE_NAME)
    return mock_dynamodb_table


@pytest.mark.aws
class TestApiHandler:
    """Test cases for lambda_handler routing."""

    def test_cors_preflight(self):
        """Test that OPTIONS is answered without touching the database."""
        response = lambda_handler(_event("OPTIONS", "/logs"), None)

        assert response["statusCode"] == 200
        assert "DELETE" in response["headers"]["Access-Control-Allow-Methods"]

    def test_health(self, api_table):
        """Test the health endpoint with a reachable table."""
        response = lambda_handler(_event("GET", "/health"), None)

        assert response["statusCode"] == 200
        assert _body(response)["status"] == "healthy"

    def test_health_reports_environment(self, api_table, monkeypatch):
        """Test that the health endpoint reports the configured environment."""
        default = _body(lambda_handler(_event("GET", "/health"), None))["environment"]
        assert default == api_handler.ENVIRONMENT != "unknown"

        monkeypatch.setattr(api_handler, "ENVIRONMENT", "staging")

        response = lambda_handler(_event("GET", "/health"), None)

        assert _body(response)["environment"] == "staging"

    def test_service_init_failure(self, monkeypatch):
        """Test that a missing table configuration returns 500."""
        monkeypatch.delenv("ACTIVITY_LOGS_TABLE", raising=False)

        response = lambda_handler(_event("GET", "/logs"), None)

        assert response["statusCode"] == 500
        assert _body(response)["error"] == "Service initialization failed"

    def test_unknown_route(self, api_table):
        """Test that unknown routes return 404."""
        response = lambda_handler(_event("PATCH", "/logs"), None)

        assert response["statusCode"] == 404

    def test_create_and_get_entry(self, api_table):
        """Test creating an entry and reading it back."""
        response = lambda_handler(_event("POST", "/logs", body={
            "activity_type": "Reading",
            "time_elapsed": "00:45:00",
            "user_id": TEST_USER_ID,
        }), None)

        assert response["statusCode"] == 201
        created = _body(response)["log"]
        assert created["time_elapsed"] == 2700
        assert created["time_elapsed_display"] == "00:45:00"

        response = lambda_handler(_event("GET", "/logs/{id}", path_params={"id": created["id"]}), None)

        assert response["statusCode"] == 200
        assert _body(response)["log"]["activity_type"] == "Reading"

    def test_create_entry_missing_field(self, api_table):
        """Test that a missing required field returns 400."""
        response = lambda_handler(_event("POST", "/logs", body={
            "activity_type": "Reading",
            "user_id": TEST_USER_ID,
        }), None)

        assert response["statusCode"] == 400
        assert "time_elapsed" in _body(response)["details"]

    def test_create_entry_invalid_data(self, api_table):
        """Test that invalid field values return 400."""
        response = lambda_handler(_event("POST", "/logs", body={
            "activity_type": "Reading",
            "time_elapsed": -10,
            "user_id": TEST_USER_ID,
        }), None)

        assert response["statusCode"] == 400

    @pytest.mark.parametrize("body", ["", "{not json", "[1, 2]"])
    def test_create_entry_bad_body(self, api_table, body):
        """Test that missing or malformed bodies return 400."""
        response = lambda_handler(_event("POST", "/logs", body=body), None)

        assert response["statusCode"] == 400

    def test_get_missing_entry(self, api_table):
        """Test that an unknown ID returns 404."""
        response = lambda_handler(_event("GET", "/logs/{id}", path_params={"id": "log_missing"}), None)

        assert response["statusCode"] == 404

    def test_list_entries(self, api_table, populated_database, sample_entries):
        """Test listing a user's entries newest first."""
        response = lambda_handler(
            _event("GET", "/logs", query_params={"user": TEST_USER_ID, "limit": "2"}), None
        )

        assert response["statusCode"] == 200
        data = _body(response)
        assert data["total_count"] == 2
        assert [log["id"] for log in data["logs"]] == [sample_entries[2].id, sample_entries[1].id]

    @pytest.mark.parametrize("limit", ["0", "abc"])
    def test_list_entries_invalid_limit(self, api_table, limit):
        """Test that a bad limit returns 400."""
        response = lambda_handler(_event("GET", "/logs", query_params={"limit": limit}), None)

        assert response["statusCode"] == 400

    def test_update_entry(self, api_table, populated_database, sample_entries):
        """Test editing an entry's duration with HH:MM:SS."""
        entry_id = sample_entries[0].id

        response = lambda_handler(
            _event("PUT", "/logs/{id}", path_params={"id": entry_id}, body={"time_elapsed": "00:50:00"}),
            None,
        )

        assert response["statusCode"] == 200
        assert _body(response)["log"]["time_elapsed"] == 3000
        assert populated_database.get_entry(entry_id).time_elapsed == 3000

    def test_update_entry_invalid(self, api_table, populated_database, sample_entries):
        """Test that an edit without fields returns 400."""
        response = lambda_handler(
            _event("PUT", "/logs/{id}", path_params={"id": sample_entries[0].id}, body={}),
            None,
        )

        assert response["statusCode"] == 400

    def test_update_missing_entry(self, api_table):
        """Test that editing an unknown ID returns 404."""
        response = lambda_handler(
            _event("PUT", "/logs/{id}", path_params={"id": "log_missing"}, body={"time_elapsed": 10}),
            None,
        )

        assert response["statusCode"] == 404

    def test_delete_entry(self, api_table, populated_database, sample_entries):
        """Test deleting an entry, then deleting it again."""
        event = _event("DELETE", "/logs/{id}", path_params={"id": sample_entries[0].id})

        assert lambda_handler(event, None)["statusCode"] == 200
        assert lambda_handler(event, None)["statusCode"] == 404

    def test_activity_types(self, api_table, populated_database):
        """Test the recently used activity names endpoint."""
        response = lambda_handler(
            _event("GET", "/activity-types", query_params={"user": TEST_USER_ID}), None
        )

        assert response["statusCode"] == 200
        assert _body(response)["activity_types"] == ["Reading", "Running"]

    def test_request_log_omits_user(self, api_table, capsys):
        """Test that the request log line does not include the user ID."""
        lambda_handler(_event("GET", "/logs", query_params={"user": TEST_USER_ID, "limit": "5"}), None)

        request_line = capsys.readouterr().out.splitlines()[0]
        assert TEST_USER_ID not in request_line
        assert json.loads(request_line)["queryParams"] == {"limit": "5"}
