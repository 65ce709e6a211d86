"""Data models for directory API payloads and fetch settings.

Architecture:
    This module exports the Pydantic v2 models used at the transport
    boundary and by callers. Models are immutable (frozen=True) so a decoded
    page or batch response cannot be modified while the runners work on it.

Model Categories:
    - Payloads: PageResult, BatchSubRequest, BatchSubResponse, BatchResponse
    - Settings: FetchOptions
"""

from .batch import BatchResponse, BatchSubRequest, BatchSubResponse, batch_payload
from .options import FetchOptions
from .page import PageResult

__all__ = [
    "BatchResponse",
    "BatchSubRequest",
    "BatchSubResponse",
    "FetchOptions",
    "PageResult",
    "batch_payload",
]
