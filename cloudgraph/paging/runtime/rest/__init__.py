"""REST runtime abstractions."""

from .http_client import HTTPClient
from .transport import DirectoryTransport, GraphTransport

__all__ = [
    "HTTPClient",
    "GraphTransport",
    "DirectoryTransport",
]
