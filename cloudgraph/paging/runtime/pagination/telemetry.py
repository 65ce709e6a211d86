"""Structured logging for paging operations.

This module provides telemetry hooks for fetches, batches and rounds,
emitting structured logs for observability.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .definitions import FetchResult

logger = logging.getLogger(__name__)


def log_fetch_started(
    *,
    endpoint: str,
    base_uri: str,
    page_size: int,
    strategy: str,
    concurrent: bool,
    max_concurrent_jobs: int,
) -> None:
    """Log the start of a collection fetch."""
    logger.info(
        "fetch_started",
        extra={
            "endpoint": endpoint,
            "base_uri": base_uri,
            "page_size": page_size,
            "strategy": strategy,
            "concurrent": concurrent,
            "max_concurrent_jobs": max_concurrent_jobs,
        },
    )


def log_first_page(*, endpoint: str, rows: int, has_more: bool, latency_ms: float) -> None:
    """Log the unbatched first page."""
    logger.debug(
        "first_page_completed",
        extra={
            "endpoint": endpoint,
            "rows": rows,
            "has_more": has_more,
            "latency_ms": latency_ms,
        },
    )


def log_batch_completed(
    *,
    requested: int,
    rows_aggregated: int,
    markers_discovered: int,
    failures: int,
    latency_ms: float | None = None,
) -> None:
    """Log completion of a single $batch round trip.

    Args:
        requested: Number of sub-requests in the batch
        rows_aggregated: Records retrieved by the batch
        markers_discovered: Continuation markers found in the batch
        failures: Branches abandoned in the batch
        latency_ms: Round trip latency in milliseconds (optional)
    """
    logger.debug(
        "batch_completed",
        extra={
            "requested": requested,
            "rows_aggregated": rows_aggregated,
            "markers_discovered": markers_discovered,
            "failures": failures,
            "latency_ms": latency_ms,
        },
    )


def log_round_completed(
    *,
    round_index: int,
    batches: int,
    rows_aggregated: int,
    pending: int,
    latency_ms: float | None = None,
) -> None:
    """Log completion of one concurrent round (after its barrier)."""
    logger.info(
        "round_completed",
        extra={
            "round_index": round_index,
            "batches": batches,
            "rows_aggregated": rows_aggregated,
            "pending": pending,
            "latency_ms": latency_ms,
        },
    )


def log_sub_request_failed(
    *,
    correlation_id: str,
    status: int | None,
    reason: str,
) -> None:
    """Log a failed or missing sub-response; its branch is abandoned."""
    logger.warning(
        f"Sub-request {correlation_id} failed with status {status}: {reason}; "
        "remaining pages of this branch will not be retrieved",
        extra={
            "correlation_id": correlation_id,
            "status": status,
            "reason": reason,
        },
    )


def log_response_count_mismatch(*, requested: int, received: int) -> None:
    """Log a batch response that is missing sub-responses."""
    logger.warning(
        f"Batch returned {received} responses for {requested} requests",
        extra={"requested": requested, "received": received},
    )


def log_link_without_token(*, next_link: str) -> None:
    """Log a next link that the token strategy has to follow verbatim."""
    logger.warning(
        f"Next link carries no skip token, following it as a full link: {next_link}",
        extra={"next_link": next_link},
    )


def log_memory_threshold_exceeded(*, record_count: int, estimated_mb: float, threshold_mb: float) -> None:
    """Log the one-time memory threshold warning."""
    logger.warning(
        f"Approximately {estimated_mb:.1f} MB held for {record_count} records exceeds the "
        f"{threshold_mb:g} MB threshold (estimate, not a measurement)",
        extra={
            "record_count": record_count,
            "estimated_mb": estimated_mb,
            "threshold_mb": threshold_mb,
        },
    )


def log_fetch_complete(*, endpoint: str, result: FetchResult) -> None:
    """Log completion of a collection fetch."""
    logger.info(
        "fetch_complete",
        extra={
            "endpoint": endpoint,
            "total_records": result.count,
            "batches_issued": result.batches_issued,
            "rounds": result.rounds,
            "failed_branches": len(result.failures),
            "complete": result.complete,
            "elapsed_ms": result.elapsed_ms,
        },
    )
    if not result.complete:
        logger.warning(
            f"Fetch of {endpoint} is incomplete: {len(result.failures)} branch(es) abandoned",
            extra={"endpoint": endpoint, "failed_branches": len(result.failures)},
        )
