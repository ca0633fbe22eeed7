"""
Root conftest.py - Global fixtures and configuration for all test layers.

Test Layers:
    - component/: Component tests (mocked repository / database client)
    - unit/     : Unit tests (pure functions, no I/O)
    - contracts/: Test data factories shared by all layers
"""
import os
import sys

import pytest

# Set testing environment BEFORE any service imports
os.environ.setdefault("ENV", "testing")
os.environ.setdefault("ENVIRONMENT", "testing")

# Add project root to path
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, PROJECT_ROOT)

from tests.contracts.rating.data_contract import RatingTestDataFactory


# =============================================================================
# Pytest Configuration
# =============================================================================

def pytest_configure(config):
    """Configure custom markers"""
    config.addinivalue_line("markers", "unit: pure function tests, no I/O")
    config.addinivalue_line("markers", "component: component tests with mocked dependencies")
    config.addinivalue_line("markers", "golden: safety net tests - DO NOT MODIFY")


# =============================================================================
# Shared Fixtures
# =============================================================================

@pytest.fixture
def data_factory():
    """Provide data factory for test data generation"""
    return RatingTestDataFactory
