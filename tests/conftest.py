"""Pytest configuration and shared fixtures."""

import pytest


# Variables read by the config helpers; a developer's .env must not leak in
CONFIG_ENV_KEYS = [
    "BEACON_ENDPOINT",
    "ETH_RPC_URL",
    "ETHSTORE_TIMEOUT",
    "ETHSTORE_MAX_RETRIES",
    "ETHSTORE_RETRY_BASE_DELAY",
    "ETHSTORE_RETRY_MAX_DELAY",
    "ETHSTORE_CONCURRENCY",
    "ETHSTORE_LOG_LEVEL",
    "ETHSTORE_CHECK_FINALITY",
]


@pytest.fixture(autouse=True)
def isolated_config_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Run every test without configuration from the environment."""
    for key in CONFIG_ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
