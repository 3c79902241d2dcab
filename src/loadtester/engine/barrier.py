"""Countable completion barrier."""

from __future__ import annotations

import asyncio


class CompletionBarrier:
    """Blocks waiters until every registered operation has signalled done.

    Used at two levels: each worker owns one counting the request tasks
    it spawned, and the pool owns one counting the workers. ``add()``
    must be called before the operation it accounts for is started.

    Attributes:
        name: Label used in error messages and logs.
    """

    def __init__(self, name: str = "barrier") -> None:
        self.name = name
        self._pending = 0
        self._released = asyncio.Event()
        self._released.set()

    @property
    def pending(self) -> int:
        """Return the number of operations not yet done."""
        return self._pending

    def add(self, delta: int = 1) -> None:
        """Register ``delta`` more outstanding operations.

        Raises:
            ValueError: If delta is negative.
        """
        if delta < 0:
            msg = f"{self.name}: delta must be >= 0, got: {delta}"
            raise ValueError(msg)
        self._pending += delta
        if self._pending > 0:
            self._released.clear()

    def done(self) -> None:
        """Mark one operation as finished.

        Raises:
            RuntimeError: If called more times than operations were added.
        """
        if self._pending == 0:
            msg = f"{self.name}: done() called with no pending operations"
            raise RuntimeError(msg)
        self._pending -= 1
        if self._pending == 0:
            self._released.set()

    async def wait(self) -> None:
        """Suspend until the pending count drops to zero."""
        await self._released.wait()
