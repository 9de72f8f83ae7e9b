"""
Test package for the ActivityLog application.

Test Organization:
    unit/: Unit tests for the stopwatch, local store, log services and API
    conftest.py: Pytest configuration and shared fixtures
"""
