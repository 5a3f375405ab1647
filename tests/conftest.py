#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Pytest configuration file for the Bark Lead Decoder test suite.
"""

import os
import sys
import logging
import pytest
from pathlib import Path

# Add the src directory to Python path for accessing bark_lead_decoder
project_root = Path(__file__).parent.parent
src_path = os.path.join(project_root, "src")
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from bark_lead_decoder.utils import logger as logger_module

TEST_DATA_DIR = Path(__file__).parent / "test_data"


def load_test_page(name: str) -> str:
    """Read an HTML page from the test data directory."""
    return (TEST_DATA_DIR / name).read_text(encoding="utf-8")


# Define pytest markers
def pytest_configure(config):
    """Configure pytest."""
    config.addinivalue_line(
        "markers", "integration: mark test as using a real SQLite contact store"
    )


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Undo handler and propagation changes made by configure_logging."""
    yield
    package_logger = logging.getLogger("bark_lead_decoder")
    for handler in package_logger.handlers[:]:
        package_logger.removeHandler(handler)
        handler.close()
    package_logger.propagate = True
    package_logger.setLevel(logging.NOTSET)
    logger_module._loggers.clear()


@pytest.fixture(scope="session")
def test_data_dir() -> Path:
    """Path to the test data directory."""
    return TEST_DATA_DIR


@pytest.fixture(scope="session")
def sample_card_html() -> str:
    """Single verified UK marketing provider card."""
    return load_test_page("sample_provider_card.html")


@pytest.fixture(scope="session")
def directory_html() -> str:
    """US directory page with two complete cards and one empty card."""
    return load_test_page("provider_directory.html")


@pytest.fixture(scope="function")
def temp_db_path(tmp_path: Path) -> Path:
    """Temporary database path for testing."""
    return tmp_path / "test.db"


@pytest.fixture(scope="function")
def temp_log_path(tmp_path: Path) -> Path:
    """Temporary log file path for testing."""
    return tmp_path / "logs" / "test.log"


@pytest.fixture(scope="function")
def mock_env_vars(monkeypatch, temp_db_path: Path, temp_log_path: Path):
    """
    Set up environment variables for testing.

    Args:
        monkeypatch: Pytest monkeypatch fixture
        temp_db_path: Temporary database path
        temp_log_path: Temporary log file path
    """
    monkeypatch.setenv("LOG_LEVEL", "DEBUG")
    monkeypatch.setenv("LOG_FILE_PATH", str(temp_log_path))
    monkeypatch.setenv("LEAD_DB_PATH", str(temp_db_path))
    monkeypatch.setenv("DECODER_LOCALE", "uk")
    monkeypatch.setenv("LEAD_SOURCE_TAG", "bark.co.uk")
    monkeypatch.setenv("MAX_SERVICES", "5")
    monkeypatch.setenv("DECODER_MAX_WORKERS", "2")
    monkeypatch.setenv("SCOPED_PHONE_CONTEXT", "true")
    monkeypatch.setenv("DEFAULT_USER_ID", "7")
    monkeypatch.setenv("DEBUG_MODE", "true")
    monkeypatch.delenv("DECODER_LOCALE_PATH", raising=False)
