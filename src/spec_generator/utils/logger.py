"""Logging configuration with Rich output and operation timing."""

from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from typing import Generator, Optional

from rich.logging import RichHandler

_loggers: dict[str, logging.Logger] = {}


def setup_logger(name: str, level: str = "INFO") -> logging.Logger:
    """
    Configure logger with Rich handler.

    Args:
        name: Logger name
        level: Logging level

    Returns:
        Configured logger
    """
    if name in _loggers:
        return _loggers[name]

    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
    )

    logger = logging.getLogger(name)
    _loggers[name] = logger

    return logger


def get_logger(name: str, level: Optional[str] = None) -> logging.Logger:
    """
    Get or create a logger.

    Args:
        name: Logger name
        level: Optional logging level

    Returns:
        Logger instance
    """
    if name in _loggers:
        return _loggers[name]

    return setup_logger(name, level or "INFO")


def setup_logging(level: str = "INFO") -> None:
    """
    Set up global logging configuration.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR)
    """
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
        force=True,
    )

    for logger in _loggers.values():
        logger.setLevel(getattr(logging, level.upper()))

    # Request-level chatter from the HTTP stack
    for noisy in ("httpx", "httpcore"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


@contextmanager
def log_operation(logger: logging.Logger, operation: str, details: str = "") -> Generator[None, None, None]:
    """
    Context manager for logging operation start/end with timing.

    Usage:
        with log_operation(logger, "Generating stories", "epic: Onboarding"):
            ...
    """
    start_time = time.time()
    logger.info(f"[START] {operation}" + (f" - {details}" if details else ""))
    try:
        yield
        duration = time.time() - start_time
        logger.info(f"[DONE] {operation} ({duration:.2f}s)")
    except Exception as e:
        duration = time.time() - start_time
        logger.error(f"[FAILED] {operation} ({duration:.2f}s) - {str(e)}")
        raise
