"""Configuration loading for LoadTester."""

from __future__ import annotations

import os
from dataclasses import dataclass

from loadtester._internal.errors import ConfigError

DEFAULT_USER_AGENT = "LoadTester/1.0"

_TRUTHY = frozenset({"1", "true", "yes", "on"})
_FALSY = frozenset({"0", "false", "no", "off", ""})
_LOG_FORMATS = ("text", "json")


@dataclass(frozen=True)
class LoadTesterConfig:
    """Process-wide defaults, usually taken from the environment.

    Attributes:
        user_agent: ``User-Agent`` header sent with every request.
        keep_alive: Whether connections may be reused between requests.
        log_format: Either ``"text"`` or ``"json"``.
    """

    user_agent: str = DEFAULT_USER_AGENT
    keep_alive: bool = False
    log_format: str = "text"


@dataclass(frozen=True)
class RunConfig:
    """Parameters of a single load test run. Immutable once built.

    Correctness of the numeric values is the caller's responsibility; the
    CLI enforces ``>= 1`` on them before a ``RunConfig`` is created.

    Attributes:
        url: Target endpoint.
        num_requests: Total number of requests to dispatch.
        concurrency: Number of worker dispatch lanes.
        method: HTTP method.
        timeout: Per-request timeout in seconds.
        keep_alive: Whether connections may be reused between requests.
        user_agent: ``User-Agent`` header sent with every request.
    """

    url: str
    num_requests: int = 100
    concurrency: int = 10
    method: str = "GET"
    timeout: float = 10.0
    keep_alive: bool = False
    user_agent: str = DEFAULT_USER_AGENT

    def validate(self) -> None:
        """Check the settings that make a run impossible to start.

        Raises:
            ConfigError: If no target URL was supplied.
        """
        if not self.url:
            msg = "URL is required. Use -url flag"
            raise ConfigError(msg)


def _parse_bool(name: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUTHY:
        return True
    if value in _FALSY:
        return False
    msg = f"{name} must be a boolean (1/0, true/false, yes/no), got: {raw!r}"
    raise ConfigError(msg)


def load_config() -> LoadTesterConfig:
    """Load configuration from environment variables with defaults.

    Environment variables:
        LOADTESTER_USER_AGENT: User-Agent header (default: LoadTester/1.0).
        LOADTESTER_KEEP_ALIVE: Reuse connections (default: false).
        LOADTESTER_LOG_FORMAT: ``text`` or ``json`` (default: text).

    Returns:
        Populated LoadTesterConfig instance.

    Raises:
        ConfigError: If an environment variable has an invalid value.
    """
    user_agent = os.environ.get("LOADTESTER_USER_AGENT", DEFAULT_USER_AGENT)
    if not user_agent.strip():
        msg = "LOADTESTER_USER_AGENT must not be empty"
        raise ConfigError(msg)

    keep_alive = _parse_bool(
        "LOADTESTER_KEEP_ALIVE",
        os.environ.get("LOADTESTER_KEEP_ALIVE", "false"),
    )

    log_format = os.environ.get("LOADTESTER_LOG_FORMAT", "text").strip().lower()
    if log_format not in _LOG_FORMATS:
        msg = f"LOADTESTER_LOG_FORMAT must be one of {', '.join(_LOG_FORMATS)}, got: {log_format!r}"
        raise ConfigError(msg)

    return LoadTesterConfig(
        user_agent=user_agent,
        keep_alive=keep_alive,
        log_format=log_format,
    )
