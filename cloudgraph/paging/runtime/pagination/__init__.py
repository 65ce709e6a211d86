"""Continuation resolution layer for paginated collections.

This module groups the pieces the orchestrator drives once the first page
of a collection is known.

Architecture:
    The pagination layer consists of:
    - definitions.py: Markers, collection query, outcomes and results
    - extractors.py: Continuation marker capture (token or full URL)
    - builders.py: $batch request construction (at most 20 sub-requests)
    - guards.py: Approximate memory growth warning
    - runners.py: Sequential and concurrent batch runners
    - telemetry.py: Structured logging
"""

from __future__ import annotations

from .builders import BatchRequestBuilder, strip_to_batch_url
from .definitions import (
    BatchOutcome,
    BranchFailure,
    CollectionQuery,
    ContinuationMarker,
    FetchResult,
    RunnerResult,
)
from .extractors import ContinuationExtractor, extract_skip_token
from .guards import MemoryGuard, estimate_mb
from .runners import BatchRunner, ConcurrentBatchRunner, SequentialBatchRunner

__all__ = [
    "BatchOutcome",
    "BatchRequestBuilder",
    "BatchRunner",
    "BranchFailure",
    "CollectionQuery",
    "ConcurrentBatchRunner",
    "ContinuationExtractor",
    "ContinuationMarker",
    "FetchResult",
    "MemoryGuard",
    "RunnerResult",
    "SequentialBatchRunner",
    "estimate_mb",
    "extract_skip_token",
    "strip_to_batch_url",
]
