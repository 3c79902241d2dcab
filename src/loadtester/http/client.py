"""Shared HTTP client used by every worker and request task."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import TYPE_CHECKING

import aiohttp

if TYPE_CHECKING:
    from collections.abc import Callable

    from loadtester.http.request import RequestSpec


def _noop_callback(outcome: RequestOutcome) -> None:
    """Default no-op outcome callback."""


@dataclass(frozen=True)
class RequestOutcome:
    """Result of one request task.

    Attributes:
        job: Job identifier the request was made for.
        worker_id: ID of the worker that dispatched the request.
        method: HTTP method.
        url: Full request URL.
        status_code: HTTP response status code (0 if no response arrived).
        latency_ms: Time from dispatch to response headers, in milliseconds.
        error: Error description if the request failed, None otherwise.
    """

    job: int
    worker_id: int
    method: str
    url: str
    status_code: int
    latency_ms: float
    error: str | None = None

    @property
    def completed(self) -> bool:
        """True when a response was received, whatever its status."""
        return self.error is None


class LoadClient:
    """Async HTTP client wrapping a single ``aiohttp.ClientSession``.

    The session, its timeout and its connector are configured once on
    entry and never changed afterwards, so the client can be shared by
    any number of concurrent tasks.

    Keep-alives are disabled by default: every request opens a fresh
    connection and the handshake cost shows up in the measurements. The
    connector does not cap simultaneous connections, so in-flight
    concurrency is governed by the callers alone.
    """

    def __init__(
        self,
        *,
        timeout: float = 10.0,
        keep_alive: bool = False,
        outcome_callback: Callable[[RequestOutcome], None] | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            timeout: Total per-request timeout in seconds.
            keep_alive: Reuse connections between requests when True.
            outcome_callback: Invoked with a ``RequestOutcome`` after each
                request, successful or not. Defaults to a no-op.
        """
        self.timeout = timeout
        self.keep_alive = keep_alive
        self._outcome_callback = outcome_callback or _noop_callback
        self._session: aiohttp.ClientSession | None = None

    async def __aenter__(self) -> LoadClient:
        """Open the underlying aiohttp session."""
        connector = aiohttp.TCPConnector(
            limit=0,
            limit_per_host=0,
            force_close=not self.keep_alive,
        )
        self._session = aiohttp.ClientSession(
            connector=connector,
            timeout=aiohttp.ClientTimeout(total=self.timeout),
        )
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object | None,
    ) -> None:
        """Close the underlying aiohttp session."""
        if self._session is not None:
            await self._session.close()
            self._session = None

    async def send(
        self,
        request: RequestSpec,
        *,
        worker_id: int = 0,
        job: int = 0,
    ) -> RequestOutcome:
        """Send a request and time it.

        The response body is not read; the connection is released as soon
        as the status line and headers have arrived.

        Args:
            request: Descriptor produced by ``build_request``.
            worker_id: Dispatching worker, recorded in the outcome.
            job: Job identifier, recorded in the outcome.

        Returns:
            The outcome of a request that received a response.

        Raises:
            RuntimeError: If the client is used outside of an async context
                manager.
            aiohttp.ClientError: On connection or protocol failures.
            TimeoutError: If no response arrived within the timeout.
        """
        if self._session is None:
            msg = "LoadClient must be used as an async context manager"
            raise RuntimeError(msg)

        start = time.monotonic()
        status_code = 0
        error: str | None = None

        try:
            async with self._session.request(
                request.method,
                request.url,
                headers=request.headers,
            ) as resp:
                status_code = resp.status
        except Exception as exc:
            error = f"{type(exc).__name__}: {exc}"
            raise
        finally:
            outcome = RequestOutcome(
                job=job,
                worker_id=worker_id,
                method=request.method,
                url=str(request.url),
                status_code=status_code,
                latency_ms=(time.monotonic() - start) * 1000,
                error=error,
            )
            self._outcome_callback(outcome)

        return outcome
