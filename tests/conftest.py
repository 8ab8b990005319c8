"""
Pytest configuration and fixtures for nsescan tests.
"""

import os
from datetime import date
from pathlib import Path
from typing import Generator
from unittest.mock import patch

import pytest

from factories import ANCHOR, FIXTURES_DIR
from nsescan.config import Config
from nsescan.datasource import InMemoryMarketDataSource


@pytest.fixture
def anchor() -> date:
    return ANCHOR


@pytest.fixture
def market_fixture_path() -> Path:
    return FIXTURES_DIR / "market.json"


@pytest.fixture
def fixture_source(market_fixture_path: Path) -> InMemoryMarketDataSource:
    """In-memory source loaded from tests/fixtures/market.json."""
    return InMemoryMarketDataSource.from_json_file(market_fixture_path)


@pytest.fixture
def mock_env_vars() -> Generator[dict, None, None]:
    """Mock environment variables for testing."""
    test_env = {
        "NSESCAN_API_BASE_URL": "http://testserver/api/",
        "NSESCAN_TIMEOUT": "2.5",
        "NSESCAN_MAX_CONCURRENCY": "3",
        "NSESCAN_SECTORS": "Nifty Bank, Nifty IT",
        "LOG_LEVEL": "DEBUG",
        "LOG_FILE_PATH": "",
    }

    with patch.dict(os.environ, test_env, clear=False):
        yield test_env


@pytest.fixture
def test_config(mock_env_vars: dict) -> Config:
    """Create a test configuration instance."""
    return Config.load_from_env()
