#!/usr/bin/env python3
"""Compare sequential and concurrent collection fetches against a live tenant.

Each configuration fetches the same collection once; the report lists
record counts, batches, rounds and wall time so runner settings can be
tuned for a tenant.

Usage:
    # Sequential vs. concurrent with 4, 8 and 16 jobs per round
    python scripts/benchmark_paging.py users --jobs 4 8 16

    # Save the report as JSON
    python scripts/benchmark_paging.py groups --page-size 100 --output report.json

The access token and environment are read from CLOUDGRAPH_ACCESS_TOKEN and
CLOUDGRAPH_ENVIRONMENT.
"""

import argparse
import asyncio
import json
import os
import sys
from datetime import datetime
from pathlib import Path
from typing import Any

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from cloudgraph.paging import (
    CloudEnvironment,
    CollectionFetcher,
    FetchOptions,
    GraphSession,
    GraphTransport,
    PagingError,
)


class BenchmarkResult:
    """Result of fetching the collection with one runner configuration."""

    def __init__(self, name: str):
        self.name = name
        self.success = False
        self.error: str | None = None
        self.records = 0
        self.batches = 0
        self.rounds = 0
        self.failed_branches = 0
        self.elapsed_ms = 0.0
        self.timestamp = datetime.now()

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "name": self.name,
            "success": self.success,
            "error": self.error,
            "records": self.records,
            "batches": self.batches,
            "rounds": self.rounds,
            "failed_branches": self.failed_branches,
            "elapsed_ms": self.elapsed_ms,
            "timestamp": self.timestamp.isoformat(),
        }


async def run_one(
    fetcher: CollectionFetcher, endpoint: str, name: str, options: FetchOptions
) -> BenchmarkResult:
    result = BenchmarkResult(name)
    try:
        fetched = await fetcher.fetch(endpoint, options)
    except PagingError as e:
        result.error = str(e)
        return result

    result.success = fetched.complete
    result.records = fetched.count
    result.batches = fetched.batches_issued
    result.rounds = fetched.rounds
    result.failed_branches = len(fetched.failures)
    result.elapsed_ms = fetched.elapsed_ms
    return result


def print_report(endpoint: str, results: list[BenchmarkResult]) -> None:
    print("=" * 78)
    print(f"Endpoint: {endpoint}")
    print("=" * 78)
    print(f"{'Runner':18} | {'Records':>9} | {'Batches':>8} | {'Rounds':>7} | {'Failed':>6} | {'Seconds':>8}")
    print("-" * 78)
    for r in results:
        if r.error:
            print(f"{r.name:18} | error: {r.error}")
            continue
        print(
            f"{r.name:18} | {r.records:>9} | {r.batches:>8} | {r.rounds:>7} | "
            f"{r.failed_branches:>6} | {r.elapsed_ms / 1000.0:>8.2f}"
        )
    print("=" * 78)


async def main() -> int:
    parser = argparse.ArgumentParser(description="Benchmark batched collection paging")
    parser.add_argument("endpoint", nargs="?", default="users")
    parser.add_argument("--page-size", type=int, default=999)
    parser.add_argument("--jobs", type=int, nargs="+", default=[4, 8, 16], help="Concurrent jobs to try")
    parser.add_argument("--strategy", choices=["token", "url"], default="token")
    parser.add_argument("--output", type=str, help="Save report to JSON file")
    args = parser.parse_args()

    token = os.environ.get("CLOUDGRAPH_ACCESS_TOKEN")
    if not token:
        print("CLOUDGRAPH_ACCESS_TOKEN is not set", file=sys.stderr)
        return 1
    environment = CloudEnvironment.from_str(os.environ.get("CLOUDGRAPH_ENVIRONMENT", "Global"))
    session = GraphSession(environment=environment or CloudEnvironment.GLOBAL, access_token=token)

    configs = [("sequential", FetchOptions(page_size=args.page_size, strategy=args.strategy))]
    for jobs in args.jobs:
        configs.append(
            (
                f"concurrent x{jobs}",
                FetchOptions(
                    page_size=args.page_size,
                    strategy=args.strategy,
                    concurrent=True,
                    max_concurrent_jobs=jobs,
                ),
            )
        )

    results: list[BenchmarkResult] = []
    async with GraphTransport(session) as transport:
        fetcher = CollectionFetcher(transport, session)
        for name, options in configs:
            results.append(await run_one(fetcher, args.endpoint, name, options))

    print_report(args.endpoint, results)

    if args.output:
        report = {"endpoint": args.endpoint, "results": [r.to_dict() for r in results]}
        Path(args.output).write_text(json.dumps(report, indent=2))
        print(f"Report saved to {args.output}")

    return 0 if all(r.success for r in results) else 1


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
