"""``loadtester`` command: run a load test and print the summary."""

from __future__ import annotations

import logging

import typer
from rich.console import Console
from rich.panel import Panel

from loadtester import __version__
from loadtester._internal.config import RunConfig, load_config
from loadtester._internal.errors import ConfigError
from loadtester._internal.logging import get_logger, setup_logging
from loadtester.engine.runner import LoadTestRunner
from loadtester.metrics.reporter import format_summary

console = Console(stderr=True)
logger = get_logger("cli")


def _version_callback(value: bool) -> None:
    """Print version and exit.

    Args:
        value: True if --version was passed.
    """
    if value:
        typer.echo(f"loadtester {__version__}")
        raise typer.Exit


def run_cmd(
    url: str = typer.Option(
        "",
        "-url",
        "--url",
        help="Target URL to test.",
        show_default=False,
    ),
    num_requests: int = typer.Option(
        100,
        "-n",
        "--requests",
        help="Number of requests to send.",
        min=1,
    ),
    concurrency: int = typer.Option(
        10,
        "-c",
        "--concurrency",
        help="Number of concurrent workers.",
        min=1,
    ),
    method: str = typer.Option(
        "GET",
        "-method",
        "--method",
        help="HTTP method to use.",
    ),
    timeout: int = typer.Option(
        10,
        "-timeout",
        "--timeout",
        help="Timeout in seconds.",
        min=1,
    ),
    keep_alive: bool = typer.Option(
        False,
        "--keep-alive",
        help="Reuse connections between requests (also LOADTESTER_KEEP_ALIVE=1).",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose (DEBUG) logging.",
    ),
    json_logs: bool = typer.Option(
        False,
        "--json-logs",
        help="Emit log lines as JSON objects.",
    ),
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """Send NUM_REQUESTS requests to URL over CONCURRENCY workers and report throughput."""
    log_level = logging.DEBUG if verbose else logging.INFO

    try:
        defaults = load_config()
    except ConfigError as exc:
        setup_logging(level=log_level, json_format=json_logs)
        logger.critical("%s", exc)
        raise typer.Exit(code=1) from exc

    json_format = json_logs or defaults.log_format == "json"
    setup_logging(level=log_level, json_format=json_format)

    config = RunConfig(
        url=url,
        num_requests=num_requests,
        concurrency=concurrency,
        method=method,
        timeout=float(timeout),
        keep_alive=keep_alive or defaults.keep_alive,
        user_agent=defaults.user_agent,
    )

    try:
        runner = LoadTestRunner(config, log_level=log_level, json_logs=json_format)
    except ConfigError as exc:
        logger.critical("%s", exc)
        raise typer.Exit(code=1) from exc

    console.print(
        Panel(
            f"[bold]Target:[/bold]      {config.method} {config.url}\n"
            f"[bold]Requests:[/bold]    {config.num_requests}\n"
            f"[bold]Concurrency:[/bold] {config.concurrency}\n"
            f"[bold]Timeout:[/bold]     {timeout}s",
            title="LoadTester",
            border_style="cyan",
        )
    )

    result = runner.run()

    typer.echo(format_summary(result.metrics))
