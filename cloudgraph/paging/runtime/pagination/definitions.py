"""Pagination data structures.

This module defines the values that flow between the orchestrator, the
batch runners and their helpers: continuation markers, the collection query
they resume, per-batch outcomes, and the results handed back to callers.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .guards import estimate_mb


@dataclass(frozen=True)
class ContinuationMarker:
    """Pointer that resumes a listing at its next page.

    Exactly one of ``token`` or ``url`` is set, depending on the
    continuation strategy that captured it.

    Attributes:
        token: Bare skip token, composed with the CollectionQuery later
        url: Absolute next link carrying its own query state
    """

    token: str | None = None
    url: str | None = None

    def __post_init__(self) -> None:
        """Validate that the marker has exactly one representation."""
        if (self.token is None) == (self.url is None):
            raise ValueError("ContinuationMarker needs exactly one of token or url")
        if not (self.token or self.url):
            raise ValueError("ContinuationMarker value cannot be empty")

    @classmethod
    def from_token(cls, token: str) -> ContinuationMarker:
        return cls(token=token)

    @classmethod
    def from_url(cls, url: str) -> ContinuationMarker:
        return cls(url=url)

    @property
    def value(self) -> str:
        return self.token if self.token is not None else self.url  # type: ignore[return-value]


@dataclass(frozen=True)
class CollectionQuery:
    """The endpoint, page size and filter a fetch was started with.

    Attributes:
        endpoint: Collection path relative to the base URI (e.g. "users")
        page_size: Value sent as $top
        filter: Already URL-encoded $filter expression, or None
    """

    endpoint: str
    page_size: int
    filter: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "endpoint", self.endpoint.strip().strip("/"))
        if not self.endpoint:
            raise ValueError("CollectionQuery endpoint cannot be empty")

    def page_path(self, skip_token: str | None = None) -> str:
        """Relative request path; parameter order is $top, $filter, $skiptoken."""
        path = f"/{self.endpoint}?$top={self.page_size}"
        if self.filter:
            path += f"&$filter={self.filter}"
        if skip_token is not None:
            path += f"&$skiptoken={skip_token}"
        return path


@dataclass(frozen=True)
class BranchFailure:
    """A continuation branch abandoned after a failed or missing sub-response.

    Attributes:
        correlation_id: Sub-request id within its batch
        status: HTTP status of the sub-response (None if it never came back)
        marker: Marker whose page could not be retrieved
        reason: Human-readable explanation
    """

    correlation_id: str
    status: int | None
    marker: ContinuationMarker
    reason: str


@dataclass
class BatchOutcome:
    """Everything one batch round trip produced, returned by value."""

    records: list[dict[str, Any]] = field(default_factory=list)
    markers: list[ContinuationMarker] = field(default_factory=list)
    failures: list[BranchFailure] = field(default_factory=list)
    requested: int = 0


@dataclass
class RunnerResult:
    """Records and bookkeeping from one runner invocation.

    Attributes:
        records: Records retrieved by the runner, in merge order
        failures: Branches abandoned during the run
        batches_issued: Number of $batch calls made
        rounds: Number of rounds (sequential runs count one per batch)
    """

    records: list[dict[str, Any]] = field(default_factory=list)
    failures: list[BranchFailure] = field(default_factory=list)
    batches_issued: int = 0
    rounds: int = 0

    @property
    def count(self) -> int:
        return len(self.records)


@dataclass
class FetchResult:
    """Full result of one collection fetch.

    ``complete`` is False when any branch was abandoned; the records are then
    a partial view of the collection.
    """

    records: list[dict[str, Any]] = field(default_factory=list)
    failures: list[BranchFailure] = field(default_factory=list)
    batches_issued: int = 0
    rounds: int = 0
    elapsed_ms: float = 0.0
    memory_warning_fired: bool = False

    @property
    def count(self) -> int:
        return len(self.records)

    @property
    def complete(self) -> bool:
        return not self.failures

    @property
    def estimated_mb(self) -> float:
        """Approximate in-memory size of the records (heuristic, not measured)."""
        return estimate_mb(self.count)
