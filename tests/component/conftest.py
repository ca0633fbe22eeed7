"""
Component Test Layer Configuration

Structure:
    tests/component/
    ├── rating/      Rating service component tests
    └── mocks/       Mock implementations

Usage:
    pytest tests/component -v
    pytest tests/component/rating -v
"""
import pytest

from tests.component.mocks import MockAsyncPostgresClient


# =============================================================================
# Database Mocks
# =============================================================================

@pytest.fixture
def mock_db() -> MockAsyncPostgresClient:
    """Mock PostgreSQL client"""
    return MockAsyncPostgresClient()
