"""Per-call settings of an eth.store calculation."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.helpers.config import get_eth_rpc_url, get_optional_env
from src.helpers.constants import (
    DEFAULT_CONCURRENCY,
    DEFAULT_TIMEOUT,
    MAX_RETRIES,
    RETRY_BASE_DELAY,
    RETRY_MAX_DELAY,
)
from src.helpers.logging import LOG_LEVELS


class Settings(BaseModel):
    """Timeouts, retry budget, concurrency and verbosity of one calculation.

    Settings are passed into every call rather than read from globals, so two
    calculations running side by side can use different values.
    """

    request_timeout: float = Field(default=DEFAULT_TIMEOUT, gt=0)
    max_retries: int = Field(default=MAX_RETRIES, ge=1)
    retry_base_delay: float = Field(default=RETRY_BASE_DELAY, ge=0)
    retry_max_delay: float = Field(default=RETRY_MAX_DELAY, ge=0)
    concurrency: int = Field(default=DEFAULT_CONCURRENCY, ge=1)
    log_level: str = "INFO"
    check_finality: bool = True
    execution_url: str | None = None

    model_config = ConfigDict(frozen=True)

    @field_validator("log_level")
    @classmethod
    def _validate_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in LOG_LEVELS:
            msg = f"log_level must be one of {sorted(LOG_LEVELS)}"
            raise ValueError(msg)
        return level

    @classmethod
    def from_env(cls) -> Settings:
        """Build settings from ``ETHSTORE_*`` variables and ``ETH_RPC_URL``.

        Raises:
            pydantic.ValidationError: If a variable holds an invalid value
        """
        values: dict[str, str | None] = {
            "request_timeout": get_optional_env("ETHSTORE_TIMEOUT"),
            "max_retries": get_optional_env("ETHSTORE_MAX_RETRIES"),
            "retry_base_delay": get_optional_env("ETHSTORE_RETRY_BASE_DELAY"),
            "retry_max_delay": get_optional_env("ETHSTORE_RETRY_MAX_DELAY"),
            "concurrency": get_optional_env("ETHSTORE_CONCURRENCY"),
            "log_level": get_optional_env("ETHSTORE_LOG_LEVEL"),
            "check_finality": get_optional_env("ETHSTORE_CHECK_FINALITY"),
            "execution_url": get_eth_rpc_url(),
        }
        return cls.model_validate({k: v for k, v in values.items() if v is not None})


__all__ = ["Settings"]
