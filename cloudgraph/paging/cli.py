"""Command line entry point.

Usage:
    # Fetch all users, sequential batches, print a summary
    cloudgraph-paging users --token "$TOKEN"

    # Concurrent rounds of 10 batches, filtered, exported to CSV
    cloudgraph-paging users --concurrent --max-jobs 10 \\
        --filter "startswith(displayName,'A')" --output users.csv

The access token and environment default to CLOUDGRAPH_ACCESS_TOKEN and
CLOUDGRAPH_ENVIRONMENT.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys
from urllib.parse import quote

from pydantic import ValidationError

from .config import (
    DEFAULT_API_VERSION,
    DEFAULT_MAX_CONCURRENT_JOBS,
    DEFAULT_MEMORY_THRESHOLD_MB,
    DEFAULT_PAGE_SIZE,
)
from .core import CloudEnvironment, ContinuationStrategy, GraphSession, PagingError
from .exports import export_csv
from .models import FetchOptions
from .runtime import CollectionFetcher, GraphTransport
from .runtime.pagination import FetchResult

logger = logging.getLogger(__name__)

TOKEN_ENV = "CLOUDGRAPH_ACCESS_TOKEN"
ENVIRONMENT_ENV = "CLOUDGRAPH_ENVIRONMENT"


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="cloudgraph-paging",
        description="Retrieve an entire paginated directory collection using batched requests",
    )
    p.add_argument("endpoint", help="Collection path relative to the API root, e.g. users")
    p.add_argument("--page-size", type=int, default=DEFAULT_PAGE_SIZE, help="$top per page (1-999)")
    p.add_argument("--filter", default=None, help="OData $filter expression (unencoded)")
    p.add_argument("--concurrent", action="store_true", help="Run batches in concurrent rounds")
    p.add_argument(
        "--max-jobs",
        type=int,
        default=DEFAULT_MAX_CONCURRENT_JOBS,
        help="Concurrent batches per round (1-20)",
    )
    p.add_argument(
        "--memory-threshold",
        type=float,
        default=DEFAULT_MEMORY_THRESHOLD_MB,
        help="Warn once when the estimated footprint exceeds this many MB (0 disables)",
    )
    p.add_argument(
        "--strategy",
        choices=[s.value for s in ContinuationStrategy],
        default=ContinuationStrategy.TOKEN.value,
        help="How continuation markers are captured",
    )
    p.add_argument(
        "--environment",
        default=os.environ.get(ENVIRONMENT_ENV, CloudEnvironment.GLOBAL.value),
        help="National cloud: Global, USGov, USGovDoD, China, Germany",
    )
    p.add_argument("--api-version", default=DEFAULT_API_VERSION, help="API version segment")
    p.add_argument("--token", default=os.environ.get(TOKEN_ENV), help=f"Bearer token (or ${TOKEN_ENV})")
    p.add_argument("--output", default=None, help="Write records to this CSV file")
    p.add_argument("-v", "--verbose", action="count", default=0, help="More logging (-vv for debug)")
    p.add_argument("-q", "--quiet", action="store_true", help="Only log errors")
    return p.parse_args(argv)


def configure_logging(verbose: int, quiet: bool) -> None:
    if quiet:
        level = logging.ERROR
    elif verbose >= 2:
        level = logging.DEBUG
    elif verbose == 1:
        level = logging.INFO
    else:
        level = logging.WARNING
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


def build_options(args: argparse.Namespace) -> FetchOptions:
    """Turn CLI arguments into FetchOptions; the filter is URL-encoded here."""
    encoded_filter = quote(args.filter, safe="") if args.filter else None
    return FetchOptions(
        page_size=args.page_size,
        filter=encoded_filter,
        concurrent=args.concurrent,
        max_concurrent_jobs=args.max_jobs,
        memory_threshold_mb=args.memory_threshold,
        strategy=ContinuationStrategy(args.strategy),
        api_version=args.api_version,
    )


def format_summary(endpoint: str, result: FetchResult) -> str:
    lines = [
        f"Endpoint:        {endpoint}",
        f"Records:         {result.count}",
        f"Batches issued:  {result.batches_issued}",
        f"Rounds:          {result.rounds}",
        f"Elapsed:         {result.elapsed_ms / 1000.0:.2f}s",
        f"Approx. memory:  {result.estimated_mb:.1f} MB (estimate)",
        f"Complete:        {'yes' if result.complete else 'NO'}",
    ]
    for failure in result.failures:
        lines.append(
            f"  abandoned branch: request {failure.correlation_id} "
            f"status={failure.status} ({failure.reason})"
        )
    return "\n".join(lines)


async def run(args: argparse.Namespace) -> int:
    options = build_options(args)
    env = CloudEnvironment.from_str(args.environment) or args.environment
    session = GraphSession(environment=env, access_token=args.token)

    async with GraphTransport(session) as transport:
        result = await CollectionFetcher(transport, session).fetch(args.endpoint, options)

    if args.output:
        written = export_csv(result.records, args.output)
        logger.info(f"Wrote {written} records to {args.output}")

    print(format_summary(args.endpoint, result))
    return 0 if result.complete else 2


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    configure_logging(args.verbose, args.quiet)
    try:
        return asyncio.run(run(args))
    except ValidationError as e:
        print(f"Invalid options: {e}", file=sys.stderr)
        return 1
    except PagingError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
