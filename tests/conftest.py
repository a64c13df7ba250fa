"""Pytest configuration and fixtures."""

import sys
from pathlib import Path

import pytest

# Add project root to sys.path for imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

SERVICE_ENV_VARS = (
    "OPENAI_API_KEY",
    "OPENAI_MODEL",
    "OPENAI_BASE_URL",
    "GENERATE_TIMEOUT_S",
    "MOCK_AI",
    "RATE_LIMIT_MAX",
    "RATE_LIMIT_WINDOW_MS",
    "RATE_LIMIT_SWEEP_THRESHOLD",
    "LOG_LEVEL",
    "SEED_TARGETS",
)


@pytest.fixture(autouse=True)
def clean_service_env(monkeypatch):
    """Run every test without the developer's service settings."""
    for name in SERVICE_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
