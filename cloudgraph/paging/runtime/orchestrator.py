"""Full-collection fetch orchestration.

The orchestrator drives one fetch end to end:

1. Resolve the base URI from the session (fail fast when not connected).
2. GET the first page directly; there is nothing to batch yet.
3. Seed the pending queue with the first page's continuation marker.
4. Hand the queue to the sequential or the concurrent batch runner.
5. Append the runner's records after the first page's and return.

Everything it creates (queue, memory guard, accumulator) lives for one
call only; nothing is cached between fetches.
"""

from __future__ import annotations

import logging
from time import perf_counter
from typing import Any

from ..config import MAX_BATCH_REQUESTS, resolve_base_uri
from ..core.exceptions import FirstPageError, ProviderError
from ..core.session import GraphSession
from ..models import FetchOptions
from .pagination import (
    BatchRequestBuilder,
    BatchRunner,
    CollectionQuery,
    ConcurrentBatchRunner,
    ContinuationExtractor,
    FetchResult,
    MemoryGuard,
    SequentialBatchRunner,
)
from .pagination.telemetry import log_fetch_complete, log_fetch_started, log_first_page
from .rest.transport import DirectoryTransport, GraphTransport

logger = logging.getLogger(__name__)


class CollectionFetcher:
    """Retrieves an entire paginated collection using batched continuations.

    Example:
        >>> session = GraphSession(CloudEnvironment.GLOBAL, access_token=token)
        >>> async with GraphTransport(session) as transport:
        ...     fetcher = CollectionFetcher(transport, session)
        ...     result = await fetcher.fetch("users", FetchOptions(concurrent=True))
        >>> result.count, result.complete
    """

    def __init__(self, transport: DirectoryTransport, session: GraphSession | None) -> None:
        self._transport = transport
        self._session = session

    async def fetch(self, endpoint: str, options: FetchOptions | None = None) -> FetchResult:
        """Fetch every record of ``endpoint``.

        Args:
            endpoint: Collection path relative to the base URI (e.g. "users")
            options: Fetch settings (defaults when omitted)

        Returns:
            FetchResult holding all retrieved records. Check ``complete``:
            branches abandoned after sub-request failures are listed in
            ``failures`` and their remaining pages are missing.

        Raises:
            NotConnectedError: If there is no session
            FirstPageError: If the first page request fails
        """
        options = options or FetchOptions()
        base_uri = resolve_base_uri(self._session, api_version=options.api_version)
        query = CollectionQuery(endpoint=endpoint, page_size=options.page_size, filter=options.filter)
        start = perf_counter()

        log_fetch_started(
            endpoint=query.endpoint,
            base_uri=base_uri,
            page_size=options.page_size,
            strategy=options.strategy.value,
            concurrent=options.concurrent,
            max_concurrent_jobs=options.max_concurrent_jobs,
        )

        guard = MemoryGuard(options.memory_threshold_mb)
        extractor = ContinuationExtractor(options.strategy)

        first_url = f"{base_uri}{query.page_path()}"
        try:
            page = await self._transport.get_page(first_url)
        except ProviderError as e:
            raise FirstPageError(
                f"First page request for '{query.endpoint}' failed: {e}",
                url=first_url,
                status_code=e.status_code,
            ) from e

        result = FetchResult(records=list(page.items))
        pending = extractor.extract(page)
        guard.check(result.count)
        log_first_page(
            endpoint=query.endpoint,
            rows=result.count,
            has_more=bool(pending),
            latency_ms=(perf_counter() - start) * 1000.0,
        )

        if pending:
            runner = self._select_runner(
                options=options,
                batch_url=f"{base_uri}/$batch",
                builder=BatchRequestBuilder(query),
                extractor=extractor,
                guard=guard,
            )
            run = await runner.run(pending, records_before=result.count)
            result.records.extend(run.records)
            result.failures.extend(run.failures)
            result.batches_issued = run.batches_issued
            result.rounds = run.rounds

        result.elapsed_ms = (perf_counter() - start) * 1000.0
        result.memory_warning_fired = guard.fired
        log_fetch_complete(endpoint=query.endpoint, result=result)
        return result

    def _select_runner(
        self,
        *,
        options: FetchOptions,
        batch_url: str,
        builder: BatchRequestBuilder,
        extractor: ContinuationExtractor,
        guard: MemoryGuard,
    ) -> BatchRunner:
        if options.concurrent:
            logger.debug(
                "Using concurrent runner",
                extra={
                    "max_concurrent_jobs": options.max_concurrent_jobs,
                    "batch_size": MAX_BATCH_REQUESTS,
                },
            )
            return ConcurrentBatchRunner(
                self._transport,
                batch_url=batch_url,
                builder=builder,
                extractor=extractor,
                guard=guard,
                max_concurrent_jobs=options.max_concurrent_jobs,
            )
        logger.debug("Using sequential runner", extra={"batch_size": MAX_BATCH_REQUESTS})
        return SequentialBatchRunner(
            self._transport,
            batch_url=batch_url,
            builder=builder,
            extractor=extractor,
            guard=guard,
        )


async def fetch_all(
    endpoint: str,
    *,
    session: GraphSession | None,
    transport: DirectoryTransport | None = None,
    **options: Any,
) -> FetchResult:
    """Fetch a whole collection in one call.

    Keyword options are FetchOptions fields (page_size, filter, concurrent,
    max_concurrent_jobs, memory_threshold_mb, strategy, api_version). When no
    transport is given, a GraphTransport is opened for the call and closed
    afterwards.
    """
    fetch_options = FetchOptions(**options)
    if transport is not None:
        return await CollectionFetcher(transport, session).fetch(endpoint, fetch_options)

    async with GraphTransport(session) as owned:
        return await CollectionFetcher(owned, session).fetch(endpoint, fetch_options)
