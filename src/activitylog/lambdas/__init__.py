"""
AWS Lambda functions for the ActivityLog application.

This package contains the Lambda function handlers for the ActivityLog
system.

Modules:
    api_handler: Provides REST API endpoints for reviewing and editing log entries
"""

# Lambda function entry points are imported directly from their modules
# This allows for clean imports in the AWS SAM template
