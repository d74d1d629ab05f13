"""
Pytest configuration and shared fixtures for the whitelist tests.

This conftest.py:
1. Adds project root to sys.path for imports
2. Provides commonly-used fixtures via pytest's autodiscovery
3. Configures pytest markers and settings
"""

import sys
from pathlib import Path

import pytest

# =============================================================================
# Path Setup - Must happen before any local imports
# =============================================================================

_PROJECT_ROOT = Path(__file__).resolve().parent.parent

if str(_PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(_PROJECT_ROOT))

from whitelist_core.config.runtime import ENV_PREFIX  # noqa: E402


EMAILS = [
    "ama@example.com",
    "ben@example.com",
    "chris@example.com",
]


# =============================================================================
# Pytest Fixtures (autodiscovered by pytest)
# =============================================================================

@pytest.fixture
def emails():
    """The three whitelisted addresses used throughout the tests."""
    return list(EMAILS)


@pytest.fixture
def items_file(tmp_path, emails):
    """An items file holding the whitelisted addresses."""
    path = tmp_path / "emails.txt"
    path.write_text("# whitelist\n" + "\n".join(emails) + "\n\n", encoding="utf-8")
    return path


@pytest.fixture
def many_items():
    """Seventeen distinct items: odd counts appear on several layers."""
    return [f"user{i}@example.com".encode() for i in range(17)]


@pytest.fixture
def clean_env(monkeypatch):
    """Remove WHITELIST_* variables so host settings don't leak into tests."""
    for name in ("HASH_ALGORITHM", "ODD_POLICY", "LOG_LEVEL", "LOG_FILE"):
        monkeypatch.delenv(f"{ENV_PREFIX}{name}", raising=False)
    return monkeypatch


# =============================================================================
# Pytest Configuration
# =============================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )
