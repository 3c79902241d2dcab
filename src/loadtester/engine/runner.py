"""Top-level load test driver."""

from __future__ import annotations

import asyncio
import sys
from typing import TYPE_CHECKING

from loadtester._internal.logging import get_logger, setup_logging
from loadtester.engine.barrier import CompletionBarrier
from loadtester.engine.queue import JobQueue
from loadtester.engine.worker import Worker
from loadtester.http.client import LoadClient
from loadtester.metrics.models import OutcomeTally, RunResult
from loadtester.metrics.reporter import MetricsReporter

if TYPE_CHECKING:
    from collections.abc import Coroutine
    from typing import Any

    from loadtester._internal.config import RunConfig

logger = get_logger("engine.runner")


def _run_event_loop(coro: Coroutine[Any, Any, RunResult]) -> RunResult:
    """Run ``coro`` to completion on uvloop when available.

    Falls back to the default asyncio event loop on Windows or if uvloop
    is not installed.
    """
    if sys.platform == "win32":
        return asyncio.run(coro)

    try:
        import uvloop
    except ImportError:
        logger.debug("uvloop not available, using default asyncio event loop")
        return asyncio.run(coro)

    logger.debug("Running on uvloop")
    return uvloop.run(coro)


class LoadTestRunner:
    """Dispatches ``num_requests`` requests over ``concurrency`` workers.

    The run has no global deadline and cannot be cancelled part-way: it
    ends when every request has either received a response or hit the
    per-request timeout.

    Attributes:
        config: Parameters of the run.
    """

    def __init__(
        self,
        config: RunConfig,
        *,
        log_level: int = 20,
        json_logs: bool = False,
    ) -> None:
        """Initialize the runner.

        Args:
            config: Parameters of the run.
            log_level: Logging level used by ``run()``.
            json_logs: Emit JSON log lines from ``run()``.

        Raises:
            ConfigError: If the configuration has no target URL.
        """
        config.validate()
        self.config = config
        self._log_level = log_level
        self._json_logs = json_logs
        self.workers: list[Worker] = []

    def run(self) -> RunResult:
        """Execute the load test and return its result.

        Blocks until every request has finished.

        Returns:
            RunResult with timing and outcome counts.
        """
        setup_logging(level=self._log_level, json_format=self._json_logs)
        return _run_event_loop(self.run_async())

    async def run_async(self) -> RunResult:
        """Execute the load test on the running event loop.

        Returns:
            RunResult with timing and outcome counts.
        """
        config = self.config
        tally = OutcomeTally()

        logger.info(
            "Starting load test: url=%s, method=%s, requests=%d, concurrency=%d, timeout=%.1fs",
            config.url,
            config.method,
            config.num_requests,
            config.concurrency,
            config.timeout,
        )

        async with LoadClient(
            timeout=config.timeout,
            keep_alive=config.keep_alive,
            outcome_callback=tally.record,
        ) as client:
            jobs = JobQueue(capacity=config.num_requests)
            pool = CompletionBarrier("pool")
            reporter = MetricsReporter(
                total_requests=config.num_requests,
                concurrency=config.concurrency,
            )

            self.workers = [
                Worker(
                    worker_id,
                    jobs,
                    client,
                    method=config.method,
                    url=config.url,
                    headers={"User-Agent": config.user_agent},
                    outcome_callback=tally.record,
                )
                for worker_id in range(1, config.concurrency + 1)
            ]

            reporter.start()

            pool.add(len(self.workers))
            worker_tasks = [
                asyncio.create_task(worker.run(pool), name=f"worker-{worker.worker_id}")
                for worker in self.workers
            ]

            for job in range(1, config.num_requests + 1):
                await jobs.put(job)
            await jobs.close()

            await pool.wait()
            metrics = reporter.stop()

            # Already finished; surfaces unexpected worker failures
            await asyncio.gather(*worker_tasks)

        logger.info(
            "Load test completed: duration=%.2fs, completed=%d, failed=%d, rps=%.2f",
            metrics.duration_seconds,
            tally.completed,
            tally.failed,
            metrics.requests_per_second,
        )
        if tally.status_counts:
            logger.debug("Status codes: %s", dict(sorted(tally.status_counts.items())))
        if tally.errors_by_type:
            logger.debug("Errors by type: %s", dict(tally.errors_by_type))

        return RunResult(metrics=metrics, tally=tally)
