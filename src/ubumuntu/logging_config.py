# src/ubumuntu/logging_config.py
"""Logging setup for Ubumuntu.

Library modules call ``get_logger(__name__)`` and never attach handlers
themselves. Applications (the CLI, a web adapter) call ``configure_logging``
once to get key=value structured output on stderr.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

ROOT_LOGGER = "ubumuntu"


class StructuredFormatter(logging.Formatter):
    """Render log records as ``key=value`` pairs."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        extra_data = getattr(record, "extra_data", None)
        if isinstance(extra_data, dict):
            log_data.update(extra_data)

        parts = [f"{k}={v}" for k, v in log_data.items()]
        line = " ".join(parts)
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


def get_logger(name: str) -> logging.Logger:
    """Get a logger under the ``ubumuntu`` hierarchy.

    Args:
        name: Logger name (typically __name__)
    """
    return logging.getLogger(name)


def configure_logging(level: int | str = logging.INFO) -> logging.Logger:
    """Attach a structured stderr handler to the package root logger.

    Safe to call more than once; the handler is only added the first time.

    Args:
        level: Log level name or number.

    Returns:
        The configured package root logger.
    """
    logger = logging.getLogger(ROOT_LOGGER)
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
    logger.setLevel(level)

    if not any(getattr(h, "_ubumuntu", False) for h in logger.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(StructuredFormatter())
        handler._ubumuntu = True  # type: ignore[attr-defined]
        logger.addHandler(handler)
        logger.propagate = False

    return logger


def log_with_context(logger: logging.Logger, level: int, msg: str, **kwargs: Any) -> None:
    """Log a message with extra key=value context fields.

    Example:
        log_with_context(logger, logging.INFO, "ingested", parent_id="doc-1", chunks=4)
    """
    logger.log(level, msg, extra={"extra_data": kwargs})
