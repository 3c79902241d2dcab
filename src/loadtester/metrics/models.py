"""Metric dataclasses for LoadTester."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from loadtester.http.client import RequestOutcome

__all__ = [
    "OutcomeTally",
    "RunMetrics",
    "RunResult",
]


@dataclass(frozen=True)
class RunMetrics:
    """Timing of a complete run. Written once, never mutated.

    Attributes:
        total_requests: Number of requests the run dispatched.
        concurrency: Number of worker dispatch lanes.
        start_time: Monotonic time captured before any worker started.
        end_time: Monotonic time captured after every worker finished.
    """

    total_requests: int
    concurrency: int
    start_time: float
    end_time: float

    @property
    def duration_seconds(self) -> float:
        """Return the elapsed wall time of the run."""
        return self.end_time - self.start_time

    @property
    def requests_per_second(self) -> float:
        """Return overall throughput.

        Very short runs give very large values; a zero duration gives
        ``inf``.
        """
        duration = self.duration_seconds
        if duration <= 0:
            return float("inf")
        return self.total_requests / duration


@dataclass
class OutcomeTally:
    """Running count of request outcomes across all workers.

    Attributes:
        completed: Requests that received a response, any status.
        failed: Requests that could not be built or got no response.
        status_counts: Completed requests keyed by HTTP status code.
        errors_by_type: Failed requests keyed by exception type name.
    """

    completed: int = 0
    failed: int = 0
    status_counts: Counter[int] = field(default_factory=Counter)
    errors_by_type: Counter[str] = field(default_factory=Counter)

    @property
    def total(self) -> int:
        """Return the number of outcomes recorded so far."""
        return self.completed + self.failed

    def record(self, outcome: RequestOutcome) -> None:
        """Count one outcome.

        Args:
            outcome: Outcome emitted by the client or a worker.
        """
        if outcome.completed:
            self.completed += 1
            self.status_counts[outcome.status_code] += 1
        else:
            self.failed += 1
            error_type = (outcome.error or "").split(":", 1)[0] or "Unknown"
            self.errors_by_type[error_type] += 1


@dataclass(frozen=True)
class RunResult:
    """Everything a finished run produced.

    Attributes:
        metrics: Timing and throughput of the run.
        tally: Outcome counts of every request task.
    """

    metrics: RunMetrics
    tally: OutcomeTally
