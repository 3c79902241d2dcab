"""Custom exception hierarchy for LoadTester."""

from __future__ import annotations


class LoadTesterError(Exception):
    """Base exception for all LoadTester errors.

    All custom exceptions raised by the package inherit from this class,
    so callers can catch any LoadTester-specific error with a single
    except clause.
    """


class ConfigError(LoadTesterError):
    """Raised when configuration is invalid or missing.

    Examples:
        - The target URL was not supplied.
        - An environment variable has a value that cannot be parsed.
    """


class RequestBuildError(LoadTesterError):
    """Raised when a request descriptor cannot be constructed.

    Examples:
        - The HTTP method is not a valid token (e.g., contains spaces).
        - The URL has no ``http``/``https`` scheme or no host.
    """


class QueueClosedError(LoadTesterError):
    """Raised when a job is put on a queue that has already been closed."""
