"""Runtime orchestration components."""

from .orchestrator import CollectionFetcher, fetch_all
from .rest import DirectoryTransport, GraphTransport, HTTPClient

__all__ = [
    "CollectionFetcher",
    "fetch_all",
    "DirectoryTransport",
    "GraphTransport",
    "HTTPClient",
]
