"""Basic GET run driven from Python instead of the CLI.

Equivalent to:

    loadtester -url http://localhost:8080/ -n 200 -c 20 -timeout 5
"""

from __future__ import annotations

from loadtester import LoadTestRunner, RunConfig, format_summary


def main() -> None:
    """Hit a single endpoint and print the summary."""
    config = RunConfig(
        url="http://localhost:8080/",
        num_requests=200,
        concurrency=20,
        timeout=5.0,
    )
    result = LoadTestRunner(config).run()

    print(format_summary(result.metrics))
    print(f"Status codes: {dict(result.tally.status_counts)}")
    print(f"Failed requests: {result.tally.failed}")


if __name__ == "__main__":
    main()
