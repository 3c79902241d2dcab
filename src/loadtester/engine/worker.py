"""Dispatch lanes that pull jobs and fan out request tasks."""

from __future__ import annotations

import asyncio
import time
from typing import TYPE_CHECKING

from loadtester._internal.errors import RequestBuildError
from loadtester._internal.logging import get_logger
from loadtester.engine.barrier import CompletionBarrier
from loadtester.http.client import RequestOutcome, _noop_callback
from loadtester.http.request import build_request

if TYPE_CHECKING:
    from collections.abc import Callable

    from loadtester._internal.types import Headers, Job
    from loadtester.engine.queue import JobQueue
    from loadtester.http.client import LoadClient

logger = get_logger("engine.worker")


def _describe(exc: Exception, timeout: float) -> str:
    """Return the message of a request error, naming the timeout if empty."""
    text = str(exc)
    if not text and isinstance(exc, TimeoutError):
        return f"timeout after {timeout:g}s"
    return text


class Worker:
    """One dispatch lane of the pool.

    A worker receives jobs from the shared queue and, for each one,
    spawns a request task without waiting for earlier tasks to finish.
    The number of workers therefore bounds how many receive loops race on
    the queue (dispatch concurrency), not how many requests are in flight
    at once (in-flight concurrency).

    Attributes:
        worker_id: Identifier in ``1..concurrency``.
        spawned: Number of request tasks this worker has launched.
    """

    def __init__(
        self,
        worker_id: int,
        jobs: JobQueue,
        client: LoadClient,
        *,
        method: str,
        url: str,
        headers: Headers | None = None,
        outcome_callback: Callable[[RequestOutcome], None] | None = None,
    ) -> None:
        """Initialize the worker.

        Args:
            worker_id: Identifier used in log lines and outcomes.
            jobs: Queue shared with the other workers.
            client: HTTP client shared with the other workers.
            method: HTTP method for every request.
            url: Target URL for every request.
            headers: Extra headers merged over the default set.
            outcome_callback: Receives outcomes for requests that could
                not be built. Outcomes of sent requests come from the
                client's own callback.
        """
        self.worker_id = worker_id
        self.spawned = 0
        self._jobs = jobs
        self._client = client
        self._method = method
        self._url = url
        self._headers = dict(headers or {})
        self._outcome_callback = outcome_callback or _noop_callback
        self._pending = CompletionBarrier(f"worker-{worker_id}")
        self._tasks: set[asyncio.Task[None]] = set()

    @property
    def in_flight(self) -> int:
        """Return the number of request tasks not yet finished."""
        return self._pending.pending

    async def run(self, pool: CompletionBarrier) -> None:
        """Drain the queue, then wait for every spawned request task.

        Releases ``pool`` exactly once, after all of this worker's request
        tasks have finished.

        Args:
            pool: The pool-level barrier counting workers.
        """
        try:
            while True:
                job = await self._jobs.get()
                if job is None:
                    break
                self._pending.add()
                self.spawned += 1
                task = asyncio.create_task(
                    self._execute(job),
                    name=f"worker-{self.worker_id}-job-{job}",
                )
                # The loop only keeps weak references to tasks
                self._tasks.add(task)
                task.add_done_callback(self._tasks.discard)

            logger.debug(
                "Worker %d: queue drained after %d jobs, waiting for %d requests",
                self.worker_id,
                self.spawned,
                self._pending.pending,
            )
            await self._pending.wait()
        finally:
            pool.done()

    async def _execute(self, job: Job) -> None:
        """Build and send the request for one job, logging its outcome."""
        try:
            try:
                request = build_request(self._method, self._url, headers=self._headers)
            except RequestBuildError as exc:
                logger.error("Worker %d: Error creating request: %s", self.worker_id, exc)
                self._outcome_callback(
                    RequestOutcome(
                        job=job,
                        worker_id=self.worker_id,
                        method=self._method,
                        url=self._url,
                        status_code=0,
                        latency_ms=0.0,
                        error=f"{type(exc).__name__}: {exc}",
                    )
                )
                return

            started = time.monotonic()
            try:
                outcome = await self._client.send(
                    request,
                    worker_id=self.worker_id,
                    job=job,
                )
            except Exception as exc:
                logger.error(
                    "Worker %d: Request error: %s: %s (after %.0fms)",
                    self.worker_id,
                    type(exc).__name__,
                    _describe(exc, self._client.timeout),
                    (time.monotonic() - started) * 1000,
                )
                return

            logger.info(
                "Worker %d: Request completed with status %d",
                self.worker_id,
                outcome.status_code,
            )
        finally:
            self._pending.done()
