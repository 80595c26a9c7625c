"""Centralized logging configuration.

Called once when the application is created (or by the ``vidscrub`` entry
point). Modules obtain their logger through :func:`get_logger`.
"""
from __future__ import annotations

import logging
import sys
from typing import Literal

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def _configure_third_party_log_levels() -> None:
    """Keep multipart parser internals from flooding debug output."""
    logging.getLogger("python_multipart").setLevel(logging.WARNING)
    logging.getLogger("python_multipart.multipart").setLevel(logging.WARNING)
    logging.getLogger("multipart").setLevel(logging.WARNING)


def configure_logging(
    *,
    level: LogLevel | str | None = None,
    verbose: bool = False,
    quiet: bool = False,
    format_string: str | None = None,
) -> None:
    """Configure application logging.

    Args:
        level: Explicit log level (overrides verbose/quiet).
        verbose: Enable DEBUG logging, which includes the full FFmpeg and
            Whisper command lines.
        quiet: Only log critical errors.
        format_string: Custom log format (uses default if None).

    Examples:
        >>> configure_logging(level="DEBUG")
        >>> configure_logging(quiet=True)
    """
    if level is not None:
        log_level = getattr(logging, str(level).upper(), logging.INFO)
    elif verbose:
        log_level = logging.DEBUG
    elif quiet:
        log_level = logging.CRITICAL
    else:
        log_level = logging.INFO

    if format_string is None:
        format_string = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    logging.basicConfig(
        level=log_level,
        format=format_string,
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
        force=True,
    )
    _configure_third_party_log_levels()

    if not quiet:
        logging.getLogger(__name__).debug(
            "Logging configured: level=%s", logging.getLevelName(log_level)
        )


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance with the given name.

    Examples:
        >>> logger = get_logger(__name__)
        >>> logger.info("Processing started")
    """
    return logging.getLogger(name)
