"""Closable FIFO job queue shared by all workers."""

from __future__ import annotations

import asyncio
from collections import deque

from loadtester._internal.errors import QueueClosedError
from loadtester._internal.types import Job


class JobQueue:
    """Bounded FIFO of job identifiers with explicit close.

    One producer fills the queue and then closes it; any number of
    consumers drain it. Each job is handed to exactly one consumer. Once
    the queue is closed and empty, every pending and future ``get()``
    returns ``None``.
    """

    def __init__(self, capacity: int) -> None:
        """Initialize the queue.

        Args:
            capacity: Maximum number of jobs held at once. ``put()``
                suspends while the queue is full. A capacity of 0 holds
                a single job.

        Raises:
            ValueError: If capacity is negative.
        """
        if capacity < 0:
            msg = f"capacity must be >= 0, got: {capacity}"
            raise ValueError(msg)
        self.capacity = capacity
        self._items: deque[Job] = deque()
        self._closed = False
        self._cond = asyncio.Condition()

    @property
    def closed(self) -> bool:
        """Return True once ``close()`` has been called."""
        return self._closed

    def __len__(self) -> int:
        return len(self._items)

    async def put(self, job: Job) -> None:
        """Append a job, waiting for room if the queue is full.

        Raises:
            QueueClosedError: If the queue was closed before or while
                waiting for room.
        """
        async with self._cond:
            await self._cond.wait_for(
                lambda: self._closed or len(self._items) < max(self.capacity, 1),
            )
            if self._closed:
                msg = f"cannot put job {job}: queue is closed"
                raise QueueClosedError(msg)
            self._items.append(job)
            self._cond.notify_all()

    async def get(self) -> Job | None:
        """Remove and return the oldest job.

        Returns:
            The next job, or ``None`` once the queue is closed and drained.
        """
        async with self._cond:
            await self._cond.wait_for(lambda: self._closed or bool(self._items))
            if not self._items:
                return None
            job = self._items.popleft()
            self._cond.notify_all()
            return job

    async def close(self) -> None:
        """Mark the queue closed and wake every waiter.

        Jobs already queued are still delivered. Closing twice is a no-op.
        """
        async with self._cond:
            self._closed = True
            self._cond.notify_all()
