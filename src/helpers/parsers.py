"""Parsing utilities for common data transformations."""

from datetime import UTC, datetime


def parse_hex_int(hex_value: str | None, default: int = 0) -> int:
    """Parse hex string to integer.

    Args:
        hex_value: Hex-encoded string or None
        default: Default value if hex_value is None

    Returns:
        int: Parsed integer value

    Example:
        >>> parse_hex_int("0xff")
        255
        >>> parse_hex_int(None, 0)
        0
    """
    if hex_value is None:
        return default
    return int(hex_value, 16)


def parse_unix_timestamp(seconds: int) -> datetime:
    """Convert Unix seconds to a timezone-aware UTC datetime.

    Example:
        >>> parse_unix_timestamp(1606824023)
        datetime.datetime(2020, 12, 1, 12, 0, 23, tzinfo=datetime.timezone.utc)
    """
    return datetime.fromtimestamp(seconds, tz=UTC)


__all__ = ["parse_hex_int", "parse_unix_timestamp"]
