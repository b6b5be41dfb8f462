"""
Pytest configuration for service wrapper tests.

These tests exercise the HTTP and Google wrappers with mocks and never
touch the database.
"""

import pytest


# Override the autouse database fixture from the parent conftest
@pytest.fixture(autouse=True)
async def setup_database():
    """No-op database setup for wrapper tests."""
    yield
