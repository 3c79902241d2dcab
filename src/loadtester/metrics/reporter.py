"""Run timing and the human-readable summary."""

from __future__ import annotations

import time

from loadtester.metrics.models import RunMetrics


class MetricsReporter:
    """Captures start and end times of a run.

    ``start()`` is called immediately before workers are launched and
    ``stop()`` immediately after the pool barrier releases.
    """

    def __init__(self, total_requests: int, concurrency: int) -> None:
        self.total_requests = total_requests
        self.concurrency = concurrency
        self._start_time: float | None = None
        self._metrics: RunMetrics | None = None

    @property
    def metrics(self) -> RunMetrics | None:
        """Return the captured metrics, or None before ``stop()``."""
        return self._metrics

    def start(self) -> None:
        """Record the start time.

        Raises:
            RuntimeError: If the reporter was already started.
        """
        if self._start_time is not None:
            msg = "MetricsReporter.start() called twice"
            raise RuntimeError(msg)
        self._start_time = time.monotonic()

    def stop(self) -> RunMetrics:
        """Record the end time and freeze the metrics.

        Returns:
            The run metrics.

        Raises:
            RuntimeError: If called before ``start()`` or more than once.
        """
        if self._start_time is None:
            msg = "MetricsReporter.stop() called before start()"
            raise RuntimeError(msg)
        if self._metrics is not None:
            msg = "MetricsReporter.stop() called twice"
            raise RuntimeError(msg)
        self._metrics = RunMetrics(
            total_requests=self.total_requests,
            concurrency=self.concurrency,
            start_time=self._start_time,
            end_time=time.monotonic(),
        )
        return self._metrics


def format_summary(metrics: RunMetrics) -> str:
    """Render the fixed-shape result summary.

    Args:
        metrics: Metrics of a finished run.

    Returns:
        Multi-line summary text, starting with a blank line.
    """
    return (
        "\nLoad Test Results:\n"
        f"Total Requests: {metrics.total_requests}\n"
        f"Concurrency Level: {metrics.concurrency}\n"
        f"Time taken: {metrics.duration_seconds:.2f} seconds\n"
        f"Requests per second: {metrics.requests_per_second:.2f}"
    )
