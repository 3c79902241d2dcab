"""Shared type aliases for LoadTester."""

from __future__ import annotations

# HTTP headers dictionary.
Headers = dict[str, str]

# Sequential job identifier, 1..num_requests.
Job = int
