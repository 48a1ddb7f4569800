"""Common configuration constants used across the application."""

# HTTP and Network Constants
DEFAULT_TIMEOUT = 30.0
"""Default HTTP request timeout in seconds"""

# Retry Configuration
MAX_RETRIES = 5
"""Default maximum number of attempts per request"""

RETRY_BASE_DELAY = 1.0
"""Base delay for exponential backoff in seconds"""

RETRY_MAX_DELAY = 60.0
"""Maximum delay between retries in seconds"""

# Concurrency Limits
DEFAULT_CONCURRENCY = 32
"""Default number of slot fetches in flight per day"""

DEFAULT_DAYS_CONCURRENCY = 1
"""Default number of days calculated in parallel"""

# HTTP Connection Pooling
MAX_KEEPALIVE_CONNECTIONS = 20
"""Maximum number of keepalive connections in pool"""

MAX_CONNECTIONS = 64
"""Maximum total number of connections"""

# Chain Constants
SECONDS_PER_DAY = 86_400
"""Length of an eth.store day in seconds"""

DAYS_PER_YEAR = 365
"""Annualization factor (leap years are ignored)"""

GWEI_IN_WEI = 10**9
"""Number of Wei in one Gwei"""

FAR_FUTURE_EPOCH = 2**64 - 1
"""Epoch sentinel meaning "never" for activation and exit epochs"""

APR_DECIMAL_PLACES = 18
"""Fractional digits used when rendering the APR as a decimal string"""


__all__ = [
    "APR_DECIMAL_PLACES",
    "DAYS_PER_YEAR",
    "DEFAULT_CONCURRENCY",
    "DEFAULT_DAYS_CONCURRENCY",
    "DEFAULT_TIMEOUT",
    "FAR_FUTURE_EPOCH",
    "GWEI_IN_WEI",
    "MAX_CONNECTIONS",
    "MAX_KEEPALIVE_CONNECTIONS",
    "MAX_RETRIES",
    "RETRY_BASE_DELAY",
    "RETRY_MAX_DELAY",
    "SECONDS_PER_DAY",
]
