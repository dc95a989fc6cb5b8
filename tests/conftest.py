"""
Shared fixtures.
"""

import pytest

from serviceplanner.adapters.mock_store import MockPlannerStore


@pytest.fixture
def mock_store() -> MockPlannerStore:
    """Store loaded with the bundled sample data."""
    return MockPlannerStore()
