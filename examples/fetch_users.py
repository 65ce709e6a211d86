#!/usr/bin/env python3
from __future__ import annotations

import argparse
import asyncio
import logging
import os

from cloudgraph.paging import CloudEnvironment, GraphSession, fetch_all


def parse_args() -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Fetch every user of a tenant with concurrent batches")
    p.add_argument("environment", nargs="?", default="Global", choices=[e.value for e in CloudEnvironment])
    p.add_argument("jobs", nargs="?", type=int, default=8)
    p.add_argument("show", nargs="?", type=int, default=10)
    return p.parse_args()


async def main() -> None:
    args = parse_args()
    logging.basicConfig(level=logging.INFO)

    session = GraphSession(
        environment=CloudEnvironment(args.environment),
        access_token=os.environ["CLOUDGRAPH_ACCESS_TOKEN"],
    )
    result = await fetch_all(
        "users",
        session=session,
        concurrent=True,
        max_concurrent_jobs=args.jobs,
    )
    print("=" * 65)
    print(f"Users      : {result.count}")
    print(f"Batches    : {result.batches_issued} in {result.rounds} rounds")
    print(f"Complete   : {result.complete}")
    print("=" * 65)
    print(f"{'Id':38} | {'Display name':24}")
    print("-" * 65)
    for user in result.records[: args.show]:
        print(f"{user.get('id', ''):38} | {str(user.get('displayName') or ''):24}")
    print("=" * 65)


if __name__ == "__main__":
    asyncio.run(main())
