"""Batch runners that drain a queue of continuation markers.

Architecture:
    Both runners share one per-batch step (BatchRunner._execute_batch): build
    a $batch request from up to 20 markers, submit it, then walk the
    sub-responses in submitted order collecting records and newly discovered
    markers. The runners differ only in how they schedule that step:

    - SequentialBatchRunner keeps exactly one batch in flight. Markers found
      by a batch join the tail of the queue and may go out in the very next
      batch.
    - ConcurrentBatchRunner works in rounds. Each round takes a snapshot of
      the queue, cuts it into chunks of at most 20 markers, dispatches at
      most ``max_concurrent_jobs`` chunks as independent tasks and waits for
      all of them. Only then are the outcomes merged, so markers discovered
      in round k are dispatched in round k+1 at the earliest.

    Units receive their chunk by value and return a BatchOutcome by value;
    the queue, the runner's record list and the memory guard are only
    touched by the runner itself, between awaits.

    The memory guard sees the cumulative record count after every page in a
    sequential run, and after each merged outcome at a concurrent round
    barrier.

Failure handling:
    A non-200 sub-response, a missing sub-response or a failed batch call
    abandons the affected branches. The failure is logged and recorded in
    RunnerResult.failures; sibling branches, batches and rounds carry on.
    Nothing is retried here.
"""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from collections import deque
from collections.abc import Iterable
from time import perf_counter

from pydantic import ValidationError

from ...config import MAX_BATCH_REQUESTS, MAX_CONCURRENT_JOBS
from ...core.exceptions import ProviderError
from ..rest.transport import DirectoryTransport
from .builders import BatchRequestBuilder
from .definitions import BatchOutcome, BranchFailure, ContinuationMarker, RunnerResult
from .extractors import ContinuationExtractor
from .guards import MemoryGuard
from .telemetry import (
    log_batch_completed,
    log_response_count_mismatch,
    log_round_completed,
    log_sub_request_failed,
)


class BatchRunner(ABC):
    """Shared per-batch behaviour of the runners."""

    def __init__(
        self,
        transport: DirectoryTransport,
        *,
        batch_url: str,
        builder: BatchRequestBuilder,
        extractor: ContinuationExtractor,
        guard: MemoryGuard | None = None,
    ) -> None:
        """Initialize runner.

        Args:
            transport: Transport used for $batch calls
            batch_url: Absolute URL of the $batch endpoint
            builder: Builds sub-requests for the fetch's collection query
            extractor: Captures markers per the fetch's continuation strategy
            guard: Memory guard shared with the orchestrator (optional)
        """
        self._transport = transport
        self._batch_url = batch_url
        self._builder = builder
        self._extractor = extractor
        self._guard = guard or MemoryGuard(0)

    @abstractmethod
    async def run(
        self,
        pending: Iterable[ContinuationMarker],
        *,
        records_before: int = 0,
    ) -> RunnerResult:
        """Drain ``pending`` and everything discovered from it.

        Args:
            pending: Initial markers, oldest first
            records_before: Records the caller already holds (for the memory guard)

        Returns:
            RunnerResult with the records retrieved by this run
        """

    async def _execute_batch(
        self,
        markers: list[ContinuationMarker],
        records_before: int | None = None,
    ) -> BatchOutcome:
        """Submit one batch and collect what its sub-responses yield.

        When ``records_before`` is given, the memory guard is checked after
        every page with the cumulative count; otherwise the caller checks it.
        """
        outcome = BatchOutcome(requested=len(markers))
        requests = self._builder.build(markers)
        start = perf_counter()

        try:
            response = await self._transport.post_batch(self._batch_url, requests)
        except ProviderError as e:
            for request, marker in zip(requests, markers):
                _fail(outcome, request.id, e.status_code, marker, f"batch call failed: {e}")
            return outcome

        by_id = response.by_id()
        if len(response.responses) < len(requests):
            log_response_count_mismatch(requested=len(requests), received=len(response.responses))

        for request, marker in zip(requests, markers):
            sub = by_id.get(request.id)
            if sub is None:
                _fail(outcome, request.id, None, marker, "no response returned for sub-request")
                continue
            if not sub.ok:
                reason = sub.error_message() or f"HTTP {sub.status}"
                _fail(outcome, request.id, sub.status, marker, reason)
                continue
            try:
                page = sub.page()
            except ValidationError as e:
                _fail(outcome, request.id, sub.status, marker, f"unreadable page body: {e}")
                continue
            outcome.records.extend(page.items)
            if records_before is not None:
                self._guard.check(records_before + len(outcome.records))
            outcome.markers.extend(self._extractor.extract(page))

        log_batch_completed(
            requested=outcome.requested,
            rows_aggregated=len(outcome.records),
            markers_discovered=len(outcome.markers),
            failures=len(outcome.failures),
            latency_ms=(perf_counter() - start) * 1000.0,
        )
        return outcome

    def _merge(self, result: RunnerResult, outcome: BatchOutcome) -> None:
        result.records.extend(outcome.records)
        result.failures.extend(outcome.failures)
        result.batches_issued += 1


class SequentialBatchRunner(BatchRunner):
    """One batch in flight at a time."""

    async def run(
        self,
        pending: Iterable[ContinuationMarker],
        *,
        records_before: int = 0,
    ) -> RunnerResult:
        queue = deque(pending)
        result = RunnerResult()

        while queue:
            chunk = [queue.popleft() for _ in range(min(MAX_BATCH_REQUESTS, len(queue)))]
            outcome = await self._execute_batch(chunk, records_before=records_before + result.count)
            self._merge(result, outcome)
            queue.extend(outcome.markers)
            result.rounds += 1

        return result


class ConcurrentBatchRunner(BatchRunner):
    """Rounds of up to ``max_concurrent_jobs`` batches with a barrier between rounds."""

    def __init__(
        self,
        transport: DirectoryTransport,
        *,
        batch_url: str,
        builder: BatchRequestBuilder,
        extractor: ContinuationExtractor,
        guard: MemoryGuard | None = None,
        max_concurrent_jobs: int = 8,
    ) -> None:
        if not 1 <= max_concurrent_jobs <= MAX_CONCURRENT_JOBS:
            raise ValueError(
                f"max_concurrent_jobs must be between 1 and {MAX_CONCURRENT_JOBS}, "
                f"got {max_concurrent_jobs}"
            )
        super().__init__(
            transport,
            batch_url=batch_url,
            builder=builder,
            extractor=extractor,
            guard=guard,
        )
        self.max_concurrent_jobs = max_concurrent_jobs

    def _take_round(self, queue: deque[ContinuationMarker]) -> list[list[ContinuationMarker]]:
        """Dequeue up to max_concurrent_jobs chunks; the rest stays queued."""
        chunks: list[list[ContinuationMarker]] = []
        while queue and len(chunks) < self.max_concurrent_jobs:
            size = min(MAX_BATCH_REQUESTS, len(queue))
            chunks.append([queue.popleft() for _ in range(size)])
        return chunks

    async def run(
        self,
        pending: Iterable[ContinuationMarker],
        *,
        records_before: int = 0,
    ) -> RunnerResult:
        queue = deque(pending)
        result = RunnerResult()

        while queue:
            chunks = self._take_round(queue)
            start = perf_counter()
            rows_before_round = result.count

            tasks = [asyncio.create_task(self._execute_batch(chunk)) for chunk in chunks]
            try:
                outcomes = await asyncio.gather(*tasks)
            finally:
                for t in tasks:
                    if not t.done():
                        t.cancel()
                await asyncio.gather(*tasks, return_exceptions=True)

            # Barrier passed: merge in dispatch order
            discovered: list[ContinuationMarker] = []
            for outcome in outcomes:
                self._merge(result, outcome)
                self._guard.check(records_before + result.count)
                discovered.extend(outcome.markers)
            queue.extend(discovered)
            result.rounds += 1

            log_round_completed(
                round_index=result.rounds,
                batches=len(chunks),
                rows_aggregated=result.count - rows_before_round,
                pending=len(queue),
                latency_ms=(perf_counter() - start) * 1000.0,
            )

        return result


def _fail(
    outcome: BatchOutcome,
    correlation_id: str,
    status: int | None,
    marker: ContinuationMarker,
    reason: str,
) -> None:
    log_sub_request_failed(correlation_id=correlation_id, status=status, reason=reason)
    outcome.failures.append(
        BranchFailure(correlation_id=correlation_id, status=status, marker=marker, reason=reason)
    )
