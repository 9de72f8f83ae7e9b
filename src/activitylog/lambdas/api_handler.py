"""
API Gateway Lambda handler for the ActivityLog application.

This Lambda function provides the REST API over the activity log store. It
serves the review screens (list, edit and delete past entries), the activity
picker (recently used activity names) and manual entry creation, with CORS
support.

Functions:
    lambda_handler: Main entry point for API Gateway events
    _handle_list_entries: Handle GET /logs endpoint
    _handle_get_entry: Handle GET /logs/{id} endpoint
    _handle_create_entry: Handle POST /logs endpoint
    _handle_update_entry: Handle PUT /logs/{id} endpoint
    _handle_delete_entry: Handle DELETE /logs/{id} endpoint
    _handle_activity_types: Handle GET /activity-types endpoint
    _handle_health_check: Handle GET /health endpoint
    _create_response: Create standardized HTTP responses
    _handle_cors_preflight: Handle OPTIONS requests for CORS
"""

import json
import os
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple
from urllib.parse import unquote_plus

from ..exceptions import RemoteSubmissionError
from ..models.activity_log import ActivityLogEntry
from ..services.activity_log_service import ActivityLogService
from ..utils import format_time


def lambda_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """
    Main Lambda handler for API Gateway events.

    Routes incoming HTTP requests to the appropriate handler functions
    based on the HTTP method and resource path.

    Args:
        event: API Gateway event containing HTTP request data
        context: AWS Lambda runtime context

    Returns:
        HTTP response dictionary with statusCode, headers, and body

    Event Structure:
        {
            "httpMethod": "GET|POST|PUT|DELETE|OPTIONS",
            "resource": "/logs|/logs/{id}|/activity-types|/health",
            "pathParameters": {"id": "log_id"},
            "queryStringParameters": {"user": "user-123", "limit": "10"},
            "body": "{\"key\": \"value\"}"
        }
    """
    try:
        _log_api_request(event)

        http_method = event.get('httpMethod', '').upper()
        resource = event.get('resource', '')
        path_params = event.get('pathParameters') or {}
        query_params = event.get('queryStringParameters') or {}

        if http_method == 'OPTIONS':
            return _handle_cors_preflight()

        try:
            log_service = ActivityLogService()
        except Exception as e:
            return _create_error_response(500, "Service initialization failed", str(e))

        if resource == '/health' and http_method == 'GET':
            return _handle_health_check(log_service)

        elif resource == '/logs' and http_method == 'GET':
            return _handle_list_entries(log_service, query_params)

        elif resource == '/logs' and http_method == 'POST':
            return _handle_create_entry(log_service, event.get('body') or '')

        elif resource == '/logs/{id}' and http_method == 'GET':
            return _handle_get_entry(log_service, path_params.get('id'))

        elif resource == '/logs/{id}' and http_method == 'PUT':
            return _handle_update_entry(log_service, path_params.get('id'), event.get('body') or '')

        elif resource == '/logs/{id}' and http_method == 'DELETE':
            return _handle_delete_entry(log_service, path_params.get('id'))

        elif resource == '/activity-types' and http_method == 'GET':
            return _handle_activity_types(log_service, query_params)

        else:
            return _create_error_response(
                404,
                "Not Found",
                f"Resource {resource} with method {http_method} not found"
            )

    except Exception as e:
        _log_api_error("UNEXPECTED_ERROR", str(e))
        return _create_error_response(500, "Internal Server Error", "Unexpected error occurred")


def _handle_health_check(log_service: ActivityLogService) -> Dict[str, Any]:
    """
    Handle GET /health endpoint for service health monitoring.

    Response Body:
        {
            "status": "healthy|degraded|unhealthy",
            "services": {"database": {"status": "healthy", ...}},
            "environment": "dev|staging|prod"
        }
    """
    try:
        health_result = log_service.health_check()

        response_data = {
            **health_result,
            "environment": ENVIRONMENT,
            "version": "1.0.0"
        }

        status_code = 503 if health_result['status'] == 'unhealthy' else 200
        return _create_response(status_code, response_data)

    except Exception as e:
        _log_api_error("HEALTH_CHECK_ERROR", str(e))
        return _create_error_response(503, "Health Check Failed", str(e))


def _handle_list_entries(log_service: ActivityLogService, query_params: Dict[str, str]) -> Dict[str, Any]:
    """
    Handle GET /logs endpoint, newest entries first.

    Query Parameters:
        - user: Filter by user ID (optional)
        - limit: Maximum number of entries (default: 50, max: 100)

    Response Body:
        {
            "logs": [
                {
                    "id": "log_2024_01_15_14_30_00_1a2b3c4d",
                    "activity_type": "Reading",
                    "time_elapsed": 2700,
                    "time_elapsed_display": "00:45:00",
                    "user_id": "user-123",
                    "created_at": "2024-01-15T14:30:00+00:00"
                }
            ],
            "total_count": 1
        }
    """
    try:
        user_id = query_params.get('user')
        limit = min(int(query_params.get('limit', '50')), 100)

        if limit < 1:
            return _create_error_response(400, "Invalid Parameters", "Limit must be positive")

        if user_id:
            user_id = unquote_plus(user_id)

        entries = log_service.list_entries(user_id=user_id, limit=limit)
        logs_data = [_serialize_entry(entry) for entry in entries]

        response_data = {
            "logs": logs_data,
            "total_count": len(logs_data),
            "filters": {"user": user_id, "limit": limit},
            "timestamp": datetime.now(timezone.utc).isoformat()
        }

        return _create_response(200, response_data)

    except ValueError as e:
        return _create_error_response(400, "Invalid Parameters", str(e))
    except Exception as e:
        _log_api_error("LIST_LOGS_ERROR", str(e), {"query_params": query_params})
        return _create_error_response(500, "Failed to retrieve logs", str(e))


def _handle_get_entry(log_service: ActivityLogService, entry_id: Optional[str]) -> Dict[str, Any]:
    """Handle GET /logs/{id} endpoint for retrieving one entry."""
    try:
        if not entry_id:
            return _create_error_response(400, "Missing Log ID", "Log ID is required")

        entry_id = unquote_plus(entry_id)
        entry = log_service.get_entry(entry_id)

        if not entry:
            return _create_error_response(404, "Log Not Found", f"Log with ID '{entry_id}' not found")

        return _create_response(200, {
            "log": _serialize_entry(entry),
            "timestamp": datetime.now(timezone.utc).isoformat()
        })

    except Exception as e:
        _log_api_error("GET_LOG_ERROR", str(e), {"entry_id": entry_id})
        return _create_error_response(500, "Failed to retrieve log", str(e))


def _handle_create_entry(log_service: ActivityLogService, body: str) -> Dict[str, Any]:
    """
    Handle POST /logs endpoint for manually recording an entry.

    Request Body:
        {
            "activity_type": "Reading",
            "time_elapsed": 2700,        // or "00:45:00"
            "user_id": "user-123"
        }
    """
    try:
        data, error_response = _parse_body(body)
        if error_response:
            return error_response

        for field in ('activity_type', 'time_elapsed', 'user_id'):
            if field not in data or data[field] in (None, ''):
                return _create_error_response(400, "Missing Required Field", f"Field '{field}' is required")

        try:
            entry = log_service.submit_entry(
                activity_type=data['activity_type'],
                time_elapsed=data['time_elapsed'],
                user_id=data['user_id'],
            )
        except RemoteSubmissionError as e:
            return _create_error_response(502, "Failed to Save Log", str(e))
        except ValueError as e:
            return _create_error_response(400, "Invalid Log Data", str(e))

        return _create_response(201, {
            "log": _serialize_entry(entry),
            "message": "Log created successfully",
            "timestamp": datetime.now(timezone.utc).isoformat()
        })

    except Exception as e:
        _log_api_error("CREATE_LOG_ERROR", str(e))
        return _create_error_response(500, "Failed to create log", str(e))


def _handle_update_entry(log_service: ActivityLogService, entry_id: Optional[str], body: str) -> Dict[str, Any]:
    """
    Handle PUT /logs/{id} endpoint for editing an entry.

    Request Body:
        {
            "activity_type": "Reading",  // optional
            "time_elapsed": "00:50:00"   // optional, seconds or HH:MM:SS
        }
    """
    try:
        if not entry_id:
            return _create_error_response(400, "Missing Log ID", "Log ID is required")

        entry_id = unquote_plus(entry_id)
        data, error_response = _parse_body(body)
        if error_response:
            return error_response

        try:
            entry = log_service.update_entry(
                entry_id,
                activity_type=data.get('activity_type'),
                time_elapsed=data.get('time_elapsed'),
            )
        except RemoteSubmissionError as e:
            return _create_error_response(502, "Failed to Update Log", str(e))
        except (TypeError, ValueError) as e:
            return _create_error_response(400, "Invalid Log Data", str(e))

        if not entry:
            return _create_error_response(404, "Log Not Found", f"Log with ID '{entry_id}' not found")

        return _create_response(200, {
            "log": _serialize_entry(entry),
            "message": "Log updated successfully",
            "timestamp": datetime.now(timezone.utc).isoformat()
        })

    except Exception as e:
        _log_api_error("UPDATE_LOG_ERROR", str(e), {"entry_id": entry_id})
        return _create_error_response(500, "Failed to update log", str(e))


def _handle_delete_entry(log_service: ActivityLogService, entry_id: Optional[str]) -> Dict[str, Any]:
    """Handle DELETE /logs/{id} endpoint."""
    try:
        if not entry_id:
            return _create_error_response(400, "Missing Log ID", "Log ID is required")

        entry_id = unquote_plus(entry_id)

        try:
            deleted = log_service.delete_entry(entry_id)
        except RemoteSubmissionError as e:
            return _create_error_response(502, "Failed to Delete Log", str(e))

        if not deleted:
            return _create_error_response(404, "Log Not Found", f"Log with ID '{entry_id}' not found")

        return _create_response(200, {
            "id": entry_id,
            "message": "Log deleted successfully",
            "timestamp": datetime.now(timezone.utc).isoformat()
        })

    except Exception as e:
        _log_api_error("DELETE_LOG_ERROR", str(e), {"entry_id": entry_id})
        return _create_error_response(500, "Failed to delete log", str(e))


def _handle_activity_types(log_service: ActivityLogService, query_params: Dict[str, str]) -> Dict[str, Any]:
    """
    Handle GET /activity-types endpoint.

    Returns the distinct activity names, most recently used first.
    """
    try:
        user_id = query_params.get('user')
        if user_id:
            user_id = unquote_plus(user_id)

        activity_types = log_service.get_recent_activity_types(user_id=user_id)

        return _create_response(200, {
            "activity_types": activity_types,
            "total_count": len(activity_types),
            "timestamp": datetime.now(timezone.utc).isoformat()
        })

    except Exception as e:
        _log_api_error("ACTIVITY_TYPES_ERROR", str(e))
        return _create_error_response(500, "Failed to retrieve activity types", str(e))


def _parse_body(body: str) -> Tuple[Dict[str, Any], Optional[Dict[str, Any]]]:
    """
    Parse a JSON request body.

    Returns:
        Tuple of the decoded object and an HTTP error response, which is set
        when the body is missing or not a JSON object
    """
    if not body or body.strip() == '':
        return {}, _create_error_response(400, "Missing Request Body", "Request body is required")

    try:
        data = json.loads(body)
    except json.JSONDecodeError as e:
        return {}, _create_error_response(400, "Invalid JSON", f"Request body is not valid JSON: {str(e)}")

    if not isinstance(data, dict):
        return {}, _create_error_response(400, "Invalid JSON", "Request body must be a JSON object")

    return data, None


def _serialize_entry(entry: ActivityLogEntry) -> Dict[str, Any]:
    entry_dict = entry.to_dynamodb_item()
    entry_dict['time_elapsed_display'] = format_time(entry.time_elapsed)
    return entry_dict


def _handle_cors_preflight() -> Dict[str, Any]:
    """Handle OPTIONS requests for CORS preflight checks."""
    return {
        "statusCode": 200,
        "headers": _get_cors_headers(),
        "body": ""
    }


def _create_response(status_code: int, data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Create a standardized HTTP response with proper headers.

    Args:
        status_code: HTTP status code
        data: Response data to serialize as JSON

    Returns:
        HTTP response dictionary
    """
    return {
        "statusCode": status_code,
        "headers": {
            **_get_cors_headers(),
            "Content-Type": "application/json"
        },
        "body": json.dumps(data, indent=2, default=str)
    }


def _create_error_response(status_code: int, error: str, details: str = "") -> Dict[str, Any]:
    """
    Create a standardized error response.

    Args:
        status_code: HTTP status code
        error: High-level error message
        details: Detailed error information

    Returns:
        HTTP error response dictionary
    """
    error_data = {
        "error": error,
        "details": details,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "status_code": status_code
    }

    return _create_response(status_code, error_data)


def _get_cors_headers() -> Dict[str, str]:
    """Get CORS headers for API responses."""
    cors_origin = os.getenv('CORS_ORIGIN', '*')

    return {
        "Access-Control-Allow-Origin": cors_origin,
        "Access-Control-Allow-Methods": "GET,POST,PUT,DELETE,OPTIONS",
        "Access-Control-Allow-Headers": "Content-Type,X-Amz-Date,Authorization,X-Api-Key,X-Amz-Security-Token",
        "Access-Control-Max-Age": "86400"  # 24 hours
    }


def _log_api_request(event: Dict[str, Any]) -> None:
    """
    Log API request information for monitoring.

    User IDs are left out of the logged query parameters.
    """
    try:
        log_data = {
            "event": "API_REQUEST",
            "httpMethod": event.get('httpMethod'),
            "resource": event.get('resource'),
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "requestId": (event.get('requestContext') or {}).get('requestId'),
        }

        query_params = event.get('queryStringParameters') or {}
        safe_params = {k: v for k, v in query_params.items() if k not in ['user']}
        if safe_params:
            log_data["queryParams"] = safe_params

        print(json.dumps(log_data))

    except Exception as e:
        print(f"Error logging API request: {e}")


def _log_api_error(error_type: str, error_message: str, context: Optional[Dict[str, Any]] = None) -> None:
    """
    Log API errors with context for debugging.

    Args:
        error_type: Type of error that occurred
        error_message: Detailed error message
        context: Additional context information
    """
    try:
        log_data = {
            "event": "API_ERROR",
            "errorType": error_type,
            "errorMessage": error_message,
            "timestamp": datetime.now(timezone.utc).isoformat()
        }

        if context:
            safe_context = {k: v for k, v in context.items() if k not in ['user_id', 'body']}
            log_data["context"] = safe_context

        print(json.dumps(log_data, default=str))

    except Exception as e:
        print(f"Error logging API error: {e}")


# Environment configuration
ENVIRONMENT = os.getenv('ENVIRONMENT', 'dev')
CORS_ORIGIN = os.getenv('CORS_ORIGIN', '*')

print(f"API Handler Lambda initialized - Environment: {ENVIRONMENT}")
