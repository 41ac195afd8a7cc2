"""Logging configuration for the portfolio engine.

The engine itself never raises for recoverable data issues (missing exchange
rates, missing class targets); it reports them through these loggers instead.
"""

import logging
import sys
from typing import Any

DEFAULT_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(
    level: str = "INFO",
    log_format: str | None = None,
) -> None:
    """Point the root logger at stdout.

    Called once by command line tools, with the level taken from
    logging.level in the configuration. Unknown level names fall back to INFO.

    Args:
        level: Level name, case-insensitive (DEBUG, INFO, WARNING, ...)
        log_format: Format string; DEFAULT_LOG_FORMAT when None

    Example:
        >>> setup_logging(level=settings.log_level)
    """
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=log_format or DEFAULT_LOG_FORMAT,
        stream=sys.stdout,
        force=True,
    )


def get_logger(name: str) -> logging.Logger:
    """Return the logger for a module (pass __name__)."""
    return logging.getLogger(name)


def log_with_context(
    logger: logging.Logger,
    level: str,
    message: str,
    **context: Any,
) -> None:
    """Log message with key=value context appended after a " | " separator.

    Example:
        >>> log_with_context(logger, "warning", "Invalid exchange rate",
        ...                  currency="XYZ", rate=0.0)
        # Invalid exchange rate | currency=XYZ rate=0.0
    """
    if context:
        pairs = " ".join(f"{key}={value}" for key, value in context.items())
        message = f"{message} | {pairs}"

    getattr(logger, level.lower())(message)
