"""Tests for calculation settings."""

import pytest

from pydantic import ValidationError

from src.ethstore.settings import Settings


ENV_KEYS = [
    "ETHSTORE_TIMEOUT",
    "ETHSTORE_MAX_RETRIES",
    "ETHSTORE_RETRY_BASE_DELAY",
    "ETHSTORE_RETRY_MAX_DELAY",
    "ETHSTORE_CONCURRENCY",
    "ETHSTORE_LOG_LEVEL",
    "ETHSTORE_CHECK_FINALITY",
    "ETH_RPC_URL",
]


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    """Remove every variable Settings reads."""
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    return monkeypatch


class TestSettings:
    """Tests for Settings validation."""

    def test_defaults(self) -> None:
        """Test the default settings."""
        settings = Settings()

        assert settings.request_timeout == 30.0
        assert settings.max_retries == 5
        assert settings.concurrency == 32
        assert settings.log_level == "INFO"
        assert settings.check_finality is True
        assert settings.execution_url is None

    def test_log_level_is_normalized(self) -> None:
        """Test level names are upper-cased."""
        assert Settings(log_level="debug").log_level == "DEBUG"

    def test_unknown_log_level_rejected(self) -> None:
        """Test unknown level names are refused."""
        with pytest.raises(ValidationError, match="log_level must be one of"):
            Settings(log_level="verbose")

    @pytest.mark.parametrize(
        "field", [{"concurrency": 0}, {"max_retries": 0}, {"request_timeout": 0}]
    )
    def test_rejects_non_positive_values(self, field: dict[str, int]) -> None:
        """Test limits that would stall a calculation are refused."""
        with pytest.raises(ValidationError):
            Settings(**field)

    def test_is_frozen(self) -> None:
        """Test settings cannot be changed after creation."""
        settings = Settings()
        with pytest.raises(ValidationError):
            settings.concurrency = 4  # type: ignore[misc]


class TestFromEnv:
    """Tests for Settings.from_env."""

    def test_defaults_without_environment(self, clean_env: pytest.MonkeyPatch) -> None:
        """Test an empty environment gives the defaults."""
        assert Settings.from_env() == Settings()

    def test_reads_environment(self, clean_env: pytest.MonkeyPatch) -> None:
        """Test every variable is picked up and converted."""
        clean_env.setenv("ETHSTORE_TIMEOUT", "12.5")
        clean_env.setenv("ETHSTORE_MAX_RETRIES", "2")
        clean_env.setenv("ETHSTORE_CONCURRENCY", "8")
        clean_env.setenv("ETHSTORE_LOG_LEVEL", "warning")
        clean_env.setenv("ETHSTORE_CHECK_FINALITY", "false")
        clean_env.setenv("ETH_RPC_URL", "http://geth:8545")

        settings = Settings.from_env()

        assert settings.request_timeout == 12.5
        assert settings.max_retries == 2
        assert settings.concurrency == 8
        assert settings.log_level == "WARNING"
        assert settings.check_finality is False
        assert settings.execution_url == "http://geth:8545"

    def test_invalid_environment(self, clean_env: pytest.MonkeyPatch) -> None:
        """Test an unparsable variable raises ValidationError."""
        clean_env.setenv("ETHSTORE_CONCURRENCY", "many")

        with pytest.raises(ValidationError):
            Settings.from_env()
