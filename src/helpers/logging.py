"""Logger module."""

import logging
import sys

import colorlog

loggers: dict[str, logging.Logger] = {}

LOG_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


def resolve_log_level(log_level: str) -> int:
    """Map a level name to its logging constant.

    Args:
        log_level: The logging level name, case-insensitive.

    Returns:
        int: The numeric logging level.

    Raises:
        ValueError: If the level name is unknown.
    """
    level = LOG_LEVELS.get(log_level.upper())
    if level is None:
        err_msg = f"Invalid log level: {log_level}"
        raise ValueError(err_msg)
    return level


def _build_handler(log_handler: str, log_color: bool, level: int) -> logging.Handler:
    if log_handler == "stdout" and not log_color:
        handler = logging.StreamHandler(sys.stdout)
    elif log_handler == "stdout" and log_color:
        handler = colorlog.StreamHandler(sys.stdout)
    else:
        err_msg = f"Invalid handler: {log_handler}"
        raise ValueError(err_msg)

    handler.setLevel(level)

    if not log_color:
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        )
    else:
        formatter = colorlog.ColoredFormatter(
            "%(log_color)s %(asctime)s - %(name)s - %(levelname)s - %(message)s",
            log_colors={
                "DEBUG": "cyan",
                "INFO": "green",
                "WARNING": "yellow",
                "ERROR": "red",
                "CRITICAL": "red,bg_white",
            },
        )

    handler.setFormatter(formatter)
    return handler


def get_logger(
    name: str,
    log_handler: str = "stdout",
    log_level: str = "INFO",
    log_color: bool = False,
) -> logging.Logger:
    """Get logger.

    A logger is configured once per name; asking again for the same name
    returns the cached instance unchanged.

    Args:
        name: The name of the logger.
        log_handler: The log handler type ('stdout').
        log_level: The logging level ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL').
        log_color: Whether to use colored output.

    Returns:
        logging.Logger: Configured logger instance.

    Raises:
        ValueError: If invalid handler or log level is provided.
    """
    if name in loggers:
        return loggers[name]

    level = resolve_log_level(log_level)

    logger = logging.getLogger(name) if not log_color else colorlog.getLogger(name)
    logger.setLevel(level)
    logger.addHandler(_build_handler(log_handler, log_color, level))

    loggers[name] = logger
    return logger


def get_call_logger(
    name: str,
    log_level: str = "INFO",
    log_handler: str = "stdout",
    log_color: bool = False,
) -> logging.Logger:
    """Get a logger owned by a single caller.

    The logger is not registered with the logging module, so callers asking
    for the same name at different levels never change each other's
    verbosity. Records still propagate to the root logger.

    Args:
        name: The name shown in log lines.
        log_level: The logging level of this caller.
        log_handler: The log handler type ('stdout').
        log_color: Whether to use colored output.

    Returns:
        logging.Logger: A fresh logger at ``log_level``.

    Raises:
        ValueError: If invalid handler or log level is provided.

    Example:
        ```python
        debug = get_call_logger("src.ethstore.calculator", log_level="DEBUG")
        quiet = get_call_logger("src.ethstore.calculator", log_level="WARNING")
        assert debug.isEnabledFor(logging.DEBUG)
        ```
    """
    level = resolve_log_level(log_level)
    logger = logging.Logger(name, level)
    logger.parent = logging.getLogger()
    logger.addHandler(_build_handler(log_handler, log_color, level))
    return logger


__all__ = ["get_call_logger", "get_logger", "resolve_log_level"]
