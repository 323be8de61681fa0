"""
Pytest Configuration and Shared Fixtures

Provides common test fixtures and configuration for the entire test suite.
"""

import tempfile
from pathlib import Path

import pytest

from homeledger.core import config as config_module
from tests.fixtures.synthetic_data import LedgerBuilder, scenario_builder


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as temp_path:
        yield Path(temp_path)


@pytest.fixture
def builder() -> LedgerBuilder:
    """Ledger builder preloaded with a small household: bank accounts, payees, a holding and categories."""
    return LedgerBuilder.household()


@pytest.fixture
def scenario_ledger():
    """Opening balance, a transfer and a reinvested dividend over ten days."""
    return scenario_builder().build()


@pytest.fixture(autouse=True)
def setup_test_environment(monkeypatch, tmp_path):
    """Set up test environment variables."""
    # Ensure tests don't use real data
    monkeypatch.setenv("HOMELEDGER_ENV", "test")
    monkeypatch.setenv("HOMELEDGER_DATA_DIR", str(tmp_path / "homeledger_data"))
    for name in ("REPORTING_CURRENCY", "SMALL_TRANSACTION_LIMIT", "SMALL_TRANSACTION_RATE", "LEDGER_FILE"):
        monkeypatch.delenv(name, raising=False)

    # Every test starts from a fresh global config
    monkeypatch.setattr(config_module, "_config", None)


# Test markers for categorizing tests
def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests for individual components")
    config.addinivalue_line("markers", "integration: Integration tests for complete workflows")
    config.addinivalue_line("markers", "currency: Tests for currency handling and precision")
    config.addinivalue_line("markers", "analysis: Tests for the analysis engine")
    config.addinivalue_line("markers", "slow: Tests that take significant time to run")
