"""Logging setup for LoadTester."""

from __future__ import annotations

import json
import logging
import sys
from datetime import UTC, datetime

ROOT_LOGGER = "loadtester"


class _JsonFormatter(logging.Formatter):
    """Structured JSON log formatter.

    Emits one-line JSON objects with keys: timestamp, level, logger, message.
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format a log record as a JSON string.

        Args:
            record: The log record to format.

        Returns:
            A single-line JSON string.
        """
        log_entry = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info and record.exc_info[1] is not None:
            log_entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_entry)


def _make_formatter(json_format: bool) -> logging.Formatter:
    if json_format:
        return _JsonFormatter()
    return logging.Formatter(
        "%(asctime)s [%(levelname)-8s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


class _StderrHandler(logging.StreamHandler):  # type: ignore[type-arg]
    """The handler :func:`setup_logging` installs on the ``loadtester`` logger."""


def setup_logging(
    level: int = logging.INFO,
    *,
    json_format: bool = False,
) -> logging.Logger:
    """Configure and return the root LoadTester logger.

    Installs a single stderr handler on the ``loadtester`` logger
    namespace. Repeated calls update the level and formatter of that
    handler instead of adding another one. If ``sys.stderr`` has been
    replaced since (e.g., under a CLI test runner), the handler is swapped
    for a fresh one bound to the current stream. Handlers installed by
    anyone else are left untouched.

    Args:
        level: Logging level (e.g., ``logging.DEBUG``). Defaults to INFO.
        json_format: If True, emit one JSON object per line.

    Returns:
        The configured ``loadtester`` root logger.
    """
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(level)

    handler = next((h for h in logger.handlers if isinstance(h, _StderrHandler)), None)
    if handler is not None and handler.stream is not sys.stderr:
        logger.removeHandler(handler)
        handler = None

    if handler is None:
        handler = _StderrHandler(sys.stderr)
        logger.addHandler(handler)

    handler.setLevel(level)
    handler.setFormatter(_make_formatter(json_format))

    # Avoid duplicate output through the root logger
    logger.propagate = False

    return logger


def get_logger(name: str) -> logging.Logger:
    """Return a child logger under the ``loadtester`` namespace.

    Args:
        name: Logger name, appended to the ``loadtester.`` prefix.
            Example: ``get_logger("engine.worker")`` returns
            ``logging.getLogger("loadtester.engine.worker")``.

    Returns:
        The child logger.
    """
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")
