"""Integration tests for the LoadTestRunner."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from loadtester._internal.config import RunConfig
from loadtester._internal.errors import ConfigError
from loadtester.engine.runner import LoadTestRunner

if TYPE_CHECKING:
    import logging


def _messages(records: list[logging.LogRecord], fragment: str) -> list[str]:
    return [r.getMessage() for r in records if fragment in r.getMessage()]


@pytest.mark.timeout(30)
class TestLoadTestRunner:
    async def test_dispatches_every_request(
        self, echo_server: str, engine_logs: list[logging.LogRecord]
    ):
        runner = LoadTestRunner(
            RunConfig(url=f"{echo_server}/echo/", num_requests=10, concurrency=2, timeout=5.0)
        )

        result = await runner.run_async()

        assert result.metrics.total_requests == 10
        assert result.metrics.concurrency == 2
        assert result.metrics.duration_seconds > 0
        assert result.tally.completed == 10
        assert result.tally.failed == 0
        assert result.tally.status_counts == {200: 10}
        assert len(_messages(engine_logs, "Request completed with status 200")) == 10
        assert len(runner.workers) == 2
        assert sum(worker.spawned for worker in runner.workers) == 10

    async def test_non_2xx_counts_as_completed(self, echo_server: str):
        runner = LoadTestRunner(
            RunConfig(url=f"{echo_server}/status?status=500", num_requests=6, concurrency=3)
        )

        result = await runner.run_async()

        assert result.tally.completed == 6
        assert result.tally.status_counts == {500: 6}

    async def test_parallel_dispatch_beats_serial_time(self, echo_server: str):
        delay = 0.4
        runner = LoadTestRunner(
            RunConfig(url=f"{echo_server}/delay?delay={delay}", num_requests=4, concurrency=4)
        )

        result = await runner.run_async()

        assert result.tally.completed == 4
        assert result.metrics.duration_seconds >= delay
        assert result.metrics.duration_seconds < 4 * delay

    async def test_single_worker_fans_out(self, echo_server: str):
        """In-flight requests are not capped by the worker count."""
        delay = 0.4
        runner = LoadTestRunner(
            RunConfig(url=f"{echo_server}/delay?delay={delay}", num_requests=6, concurrency=1)
        )

        result = await runner.run_async()

        assert result.tally.completed == 6
        assert result.metrics.duration_seconds < 3 * delay

    async def test_timeout_is_logged_and_bounded(
        self, echo_server: str, engine_logs: list[logging.LogRecord]
    ):
        timeout = 0.3
        runner = LoadTestRunner(
            RunConfig(
                url=f"{echo_server}/delay?delay=2.0",
                num_requests=3,
                concurrency=3,
                timeout=timeout,
            )
        )

        result = await runner.run_async()

        assert result.tally.failed == 3
        assert result.tally.completed == 0
        assert len(_messages(engine_logs, "Request error")) == 3
        assert result.metrics.duration_seconds < timeout + 1.0

    async def test_unreachable_target_still_reports(
        self, unreachable_url: str, engine_logs: list[logging.LogRecord]
    ):
        runner = LoadTestRunner(RunConfig(url=unreachable_url, num_requests=5, concurrency=2))

        result = await runner.run_async()

        assert result.metrics.total_requests == 5
        assert result.metrics.duration_seconds > 0
        assert result.tally.failed == 5
        assert len(_messages(engine_logs, "Request error")) == 5

    async def test_invalid_method_fails_every_request(
        self, echo_server: str, engine_logs: list[logging.LogRecord]
    ):
        runner = LoadTestRunner(
            RunConfig(url=f"{echo_server}/echo/", method="NOT VALID", num_requests=3, concurrency=2)
        )

        result = await runner.run_async()

        assert result.tally.failed == 3
        assert result.tally.errors_by_type == {"RequestBuildError": 3}
        assert len(_messages(engine_logs, "Error creating request")) == 3

    async def test_user_agent_from_config(
        self, recording_server: tuple[str, list[dict[str, object]]]
    ):
        url, seen = recording_server
        runner = LoadTestRunner(
            RunConfig(url=url, num_requests=2, concurrency=1, user_agent="bench/9")
        )

        await runner.run_async()

        assert [entry["user_agent"] for entry in seen] == ["bench/9", "bench/9"]

    def test_missing_url_raises_config_error(self):
        with pytest.raises(ConfigError, match="URL is required"):
            LoadTestRunner(RunConfig(url=""))

    def test_blocking_run(self, sync_echo_server: str):
        runner = LoadTestRunner(
            RunConfig(url=f"{sync_echo_server}/echo/", num_requests=8, concurrency=3)
        )

        result = runner.run()

        assert result.tally.completed == 8
        assert result.metrics.requests_per_second > 0
