"""Core components."""

from .enums import CloudEnvironment, ContinuationStrategy
from .exceptions import (
    BatchContractError,
    FirstPageError,
    NotConnectedError,
    PagingError,
    ProviderError,
    RateLimitError,
)
from .session import GraphSession

__all__ = [
    "CloudEnvironment",
    "ContinuationStrategy",
    "GraphSession",
    "PagingError",
    "NotConnectedError",
    "ProviderError",
    "RateLimitError",
    "FirstPageError",
    "BatchContractError",
]
