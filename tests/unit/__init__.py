"""
Unit tests for ActivityLog application components.

The stopwatch tests run on a fake clock and a manual tick scheduler; tests
that touch DynamoDB use moto and are marked `aws`.
"""
