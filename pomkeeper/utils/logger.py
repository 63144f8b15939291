"""
Logging utilities for pomkeeper.

Centralizes logger configuration and retrieval for the ``pomkeeper``
namespace. Library use stays silent (a ``NullHandler`` is attached) until
the CLI calls :func:`setup_logging`.

Per-dependency messages go through :func:`get_dependency_logger`, which
prefixes every record with the ``group:artifact`` coordinate so that a
resolution trace for one artifact can be grepped out of a long run.
"""

from __future__ import annotations

import os
import sys
import copy
import logging
import threading
from typing import IO, Any, MutableMapping, Optional, Tuple

from pomkeeper.constants import (
    LOG_DATE_FORMAT,
    LOG_DEFAULT_FORMAT,
    LOG_VERBOSE_FORMAT,
)

ROOT_LOGGER_NAME = "pomkeeper"

_logging_configured: bool = False
_lock = threading.Lock()


class ColoredFormatter(logging.Formatter):
    """Logging formatter with optional ANSI color support for level names."""

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def __init__(
        self,
        fmt: str,
        *,
        datefmt: Optional[str] = None,
        use_color: bool = True,
    ) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt)
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        if self.use_color and self._should_use_color():
            color = self.COLORS.get(record.levelname)
            if color:
                # Other handlers share the record; color a copy only
                record = copy.copy(record)
                record.levelname = f"{color}{record.levelname}{self.RESET}"
        return super().format(record)

    @staticmethod
    def _should_use_color() -> bool:
        """Determine whether ANSI colors should be emitted."""
        if os.environ.get("NO_COLOR"):
            return False
        if os.environ.get("CI"):
            return False
        try:
            return sys.stderr.isatty()
        except (AttributeError, OSError):
            return False


class DependencyLoggerAdapter(logging.LoggerAdapter):
    """Prefix log messages with a Maven ``group:artifact`` coordinate."""

    def process(
        self,
        msg: Any,
        kwargs: MutableMapping[str, Any],
    ) -> Tuple[Any, MutableMapping[str, Any]]:
        coordinate = (self.extra or {}).get("coordinate")
        if coordinate:
            return f"[{coordinate}] {msg}", kwargs
        return msg, kwargs


def setup_logging(
    *,
    level: int = logging.INFO,
    verbose: bool = False,
    stream: Optional[IO[str]] = None,
) -> None:
    """Configure logging for pomkeeper.

    Safe to call multiple times; each call replaces the previous handler.

    Args:
        level: Logging level (e.g., ``logging.INFO``, ``logging.DEBUG``).
        verbose: Enable verbose formatting with timestamps and logger names.
        stream: Output stream; defaults to ``sys.stderr``.
    """
    global _logging_configured

    with _lock:
        root_logger = logging.getLogger(ROOT_LOGGER_NAME)
        root_logger.handlers.clear()
        root_logger.setLevel(level)

        handler = logging.StreamHandler(stream or sys.stderr)
        handler.setLevel(level)
        handler.setFormatter(
            ColoredFormatter(
                LOG_VERBOSE_FORMAT if verbose else LOG_DEFAULT_FORMAT,
                datefmt=LOG_DATE_FORMAT,
                use_color=not os.environ.get("NO_COLOR"),
            )
        )

        root_logger.addHandler(handler)
        root_logger.propagate = False
        _logging_configured = True


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return a logger within the pomkeeper namespace.

    Args:
        name: Logger name, either relative (``"core.analyzer"``) or
            already qualified (``"pomkeeper.core.analyzer"``).

    Returns:
        A logger instance under the ``pomkeeper`` hierarchy.
    """
    if not name or name == ROOT_LOGGER_NAME:
        logger = logging.getLogger(ROOT_LOGGER_NAME)
    elif name.startswith(f"{ROOT_LOGGER_NAME}."):
        logger = logging.getLogger(name)
    else:
        logger = logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")

    if not logger.handlers and (not logger.parent or not logger.parent.handlers):
        logger.addHandler(logging.NullHandler())

    return logger


def get_dependency_logger(
    logger: logging.Logger,
    coordinate: str,
) -> DependencyLoggerAdapter:
    """Wrap *logger* so each message is tagged with *coordinate*.

    Example::

        >>> log = get_dependency_logger(get_logger("bom"), "org.slf4j:slf4j-api")
        >>> log.debug("managed version %s", "2.0.9")
        # DEBUG: [org.slf4j:slf4j-api] managed version 2.0.9
    """
    return DependencyLoggerAdapter(logger, {"coordinate": coordinate})


def is_logging_configured() -> bool:
    """Return True if pomkeeper logging has been configured."""
    return _logging_configured


def disable_logging() -> None:
    """Disable all pomkeeper logging output."""
    global _logging_configured

    with _lock:
        root_logger = logging.getLogger(ROOT_LOGGER_NAME)
        root_logger.handlers.clear()
        root_logger.addHandler(logging.NullHandler())
        root_logger.setLevel(logging.NOTSET)
        _logging_configured = False
