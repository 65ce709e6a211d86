"""cloudgraph-paging - batched, concurrent retrieval of paginated directory collections."""

from .config import get_base_uri, resolve_base_uri
from .core import (
    BatchContractError,
    CloudEnvironment,
    ContinuationStrategy,
    FirstPageError,
    GraphSession,
    NotConnectedError,
    PagingError,
    ProviderError,
    RateLimitError,
)
from .models import BatchResponse, BatchSubRequest, BatchSubResponse, FetchOptions, PageResult
from .runtime import CollectionFetcher, DirectoryTransport, GraphTransport, HTTPClient, fetch_all
from .runtime.pagination import (
    BatchRequestBuilder,
    BranchFailure,
    CollectionQuery,
    ConcurrentBatchRunner,
    ContinuationExtractor,
    ContinuationMarker,
    FetchResult,
    MemoryGuard,
    SequentialBatchRunner,
)

__version__ = "0.1.0"

__all__ = [
    # Core enums
    "CloudEnvironment",
    "ContinuationStrategy",
    # Session & resolution
    "GraphSession",
    "get_base_uri",
    "resolve_base_uri",
    # Models
    "PageResult",
    "BatchSubRequest",
    "BatchSubResponse",
    "BatchResponse",
    "FetchOptions",
    # Pagination
    "ContinuationMarker",
    "CollectionQuery",
    "ContinuationExtractor",
    "BatchRequestBuilder",
    "MemoryGuard",
    "SequentialBatchRunner",
    "ConcurrentBatchRunner",
    "BranchFailure",
    "FetchResult",
    # Orchestration
    "CollectionFetcher",
    "fetch_all",
    # Transport
    "DirectoryTransport",
    "GraphTransport",
    "HTTPClient",
    # Exceptions
    "PagingError",
    "NotConnectedError",
    "FirstPageError",
    "ProviderError",
    "RateLimitError",
    "BatchContractError",
]
