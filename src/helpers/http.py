"""HTTP client utilities and helpers."""

from __future__ import annotations

from asyncio import sleep
from functools import wraps

from typing import TYPE_CHECKING, Any, ParamSpec, TypeVar

import httpx

from src.helpers.constants import (
    DEFAULT_TIMEOUT,
    MAX_CONNECTIONS,
    MAX_KEEPALIVE_CONNECTIONS,
    MAX_RETRIES,
    RETRY_BASE_DELAY,
    RETRY_MAX_DELAY,
)
from src.helpers.logging import get_logger


if TYPE_CHECKING:
    import logging
    from collections.abc import Awaitable, Callable


logger = get_logger(__name__)

P = ParamSpec("P")
T = TypeVar("T")

RETRYABLE_STATUS_CODES = frozenset({429, 500, 502, 503, 504})


def is_transient_http_error(error: BaseException) -> bool:
    """Tell whether an httpx error is worth another attempt.

    Timeouts and transport failures always are. A status error is only
    transient for rate limiting and server-side failures; any other 4xx
    answer will not change on retry.

    Args:
        error: Exception raised by an httpx call

    Returns:
        True if the request should be retried
    """
    if isinstance(error, httpx.HTTPStatusError):
        return error.response.status_code in RETRYABLE_STATUS_CODES
    return isinstance(error, httpx.HTTPError)


def retry_with_backoff(
    max_retries: int = MAX_RETRIES,
    base_delay: float = RETRY_BASE_DELAY,
    max_delay: float = RETRY_MAX_DELAY,
    *,
    retry_if: Callable[[BaseException], bool] = is_transient_http_error,
    log_errors: bool = True,
    log: logging.Logger | None = None,
) -> Callable[[Callable[P, Awaitable[T]]], Callable[P, Awaitable[T]]]:
    """Decorator to retry async functions with exponential backoff.

    Args:
        max_retries: Maximum number of attempts (default: 5)
        base_delay: Initial delay in seconds (default: 1.0)
        max_delay: Maximum delay between retries (default: 60.0)
        retry_if: Predicate deciding whether an exception is retried; any
            other exception propagates immediately
        log_errors: Whether to log retry attempts (default: True)
        log: Logger for retry messages, this module's logger when omitted

    Returns:
        Decorated function that retries transient failures

    Example:
        ```python
        from src.helpers.http import retry_with_backoff

        @retry_with_backoff(max_retries=3, base_delay=2.0)
        async def fetch_data(client: httpx.AsyncClient, url: str) -> dict:
            response = await client.get(url)
            response.raise_for_status()
            return response.json()

        # Will retry up to 3 attempts with delays of 2s, 4s
        ```
    """
    if max_retries < 1:
        msg = "max_retries must be at least 1"
        raise ValueError(msg)
    retry_log = log or logger

    def decorator(func: Callable[P, Awaitable[T]]) -> Callable[P, Awaitable[T]]:
        @wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            last_exception: Exception | None = None

            for attempt in range(max_retries):
                try:
                    return await func(*args, **kwargs)
                except Exception as e:
                    if not retry_if(e):
                        raise
                    last_exception = e
                    if log_errors and attempt < max_retries - 1:
                        if isinstance(e, httpx.TimeoutException):
                            retry_log.warning(
                                "%s timeout (attempt %d/%d)",
                                func.__name__,
                                attempt + 1,
                                max_retries,
                            )
                        else:
                            retry_log.warning(
                                "%s error (attempt %d/%d): %s",
                                func.__name__,
                                attempt + 1,
                                max_retries,
                                e,
                            )

                # Don't sleep after the last attempt
                if attempt < max_retries - 1:
                    delay = min(base_delay * (2**attempt), max_delay)
                    await sleep(delay)

            if log_errors:
                retry_log.error(
                    "%s failed after %d attempts", func.__name__, max_retries
                )
            assert last_exception is not None
            raise last_exception

        return wrapper

    return decorator


def create_http_client(
    timeout: float = DEFAULT_TIMEOUT, **kwargs: Any
) -> httpx.AsyncClient:
    """Create a configured httpx AsyncClient.

    Args:
        timeout: Default timeout in seconds (default: DEFAULT_TIMEOUT)
        **kwargs: Additional httpx.AsyncClient kwargs

    Returns:
        Configured AsyncClient instance

    Example:
        ```python
        from src.helpers.http import create_http_client

        async with create_http_client(timeout=60.0) as client:
            response = await client.get("https://example.com")
        ```
    """
    kwargs.setdefault(
        "limits",
        httpx.Limits(
            max_connections=MAX_CONNECTIONS,
            max_keepalive_connections=MAX_KEEPALIVE_CONNECTIONS,
        ),
    )
    return httpx.AsyncClient(timeout=timeout, **kwargs)


__all__ = [
    "RETRYABLE_STATUS_CODES",
    "create_http_client",
    "is_transient_http_error",
    "retry_with_backoff",
]
