"""Configuration management and environment variable utilities."""

import os

from dotenv import load_dotenv


# Load environment variables from .env file
load_dotenv()

DEFAULT_BEACON_URL = "http://localhost:5052"


def get_optional_env(key: str, default: str | None = None) -> str | None:
    """Get an optional environment variable with a default value.

    Args:
        key: Environment variable name
        default: Default value if not set

    Returns:
        Environment variable value or default

    Example:
        ```python
        from src.helpers.config import get_optional_env

        concurrency = int(get_optional_env("ETHSTORE_CONCURRENCY", "32"))
        ```
    """
    return os.getenv(key, default)


def get_beacon_url(beacon_url: str | None = None) -> str:
    """Get the beacon node URL from parameter or environment.

    Args:
        beacon_url: Optional beacon node URL to use directly

    Returns:
        Beacon node URL without a trailing slash, falling back to a local node
    """
    url = beacon_url or os.getenv("BEACON_ENDPOINT") or DEFAULT_BEACON_URL
    return url.rstrip("/")


def get_eth_rpc_url(rpc_url: str | None = None) -> str | None:
    """Get the execution-layer RPC URL from parameter or environment.

    Unlike the beacon URL this one is optional: without it fees are not
    counted and only consensus rewards make up the APR.

    Args:
        rpc_url: Optional RPC URL to use directly

    Returns:
        Ethereum RPC URL, or None when neither is set

    Example:
        ```python
        from src.helpers.config import get_eth_rpc_url

        rpc_url = get_eth_rpc_url()
        ```
    """
    if rpc_url:
        return rpc_url
    return os.getenv("ETH_RPC_URL") or None


__all__ = [
    "DEFAULT_BEACON_URL",
    "get_beacon_url",
    "get_eth_rpc_url",
    "get_optional_env",
]
