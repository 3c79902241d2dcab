"""LoadTester: concurrent HTTP load generation."""

from __future__ import annotations

from loadtester._internal.config import RunConfig
from loadtester.engine.runner import LoadTestRunner
from loadtester.http.client import LoadClient, RequestOutcome
from loadtester.http.request import RequestSpec, build_request
from loadtester.metrics.models import OutcomeTally, RunMetrics, RunResult
from loadtester.metrics.reporter import format_summary

__version__ = "0.1.0"

__all__ = [
    "LoadClient",
    "LoadTestRunner",
    "OutcomeTally",
    "RequestOutcome",
    "RequestSpec",
    "RunConfig",
    "RunMetrics",
    "RunResult",
    "build_request",
    "format_summary",
]
