"""Caller-facing fetch options."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..config import (
    DEFAULT_API_VERSION,
    DEFAULT_MAX_CONCURRENT_JOBS,
    DEFAULT_MEMORY_THRESHOLD_MB,
    DEFAULT_PAGE_SIZE,
    MAX_CONCURRENT_JOBS,
    MAX_PAGE_SIZE,
)
from ..core.enums import ContinuationStrategy


class FetchOptions(BaseModel):
    """Settings for one full-collection fetch.

    The filter must already be URL-encoded; it is inserted into request
    URLs verbatim.
    """

    page_size: int = Field(default=DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE)
    filter: Optional[str] = None
    concurrent: bool = False
    max_concurrent_jobs: int = Field(default=DEFAULT_MAX_CONCURRENT_JOBS, ge=1, le=MAX_CONCURRENT_JOBS)
    memory_threshold_mb: float = Field(default=DEFAULT_MEMORY_THRESHOLD_MB, ge=0)
    strategy: ContinuationStrategy = ContinuationStrategy.TOKEN
    api_version: str = Field(default=DEFAULT_API_VERSION, min_length=1)

    @field_validator("filter")
    @classmethod
    def blank_filter_is_none(cls, v: Optional[str]) -> Optional[str]:
        """Treat an empty filter as no filter."""
        if v is None or not v.strip():
            return None
        return v.strip()

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)
