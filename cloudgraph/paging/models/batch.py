"""JSON batch request and response models."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .page import PageResult


class BatchSubRequest(BaseModel):
    """One logical GET multiplexed into a batch call."""

    id: str = Field(..., min_length=1)
    method: Literal["GET"] = "GET"
    url: str = Field(..., min_length=1)

    model_config = ConfigDict(frozen=True)


class BatchSubResponse(BaseModel):
    """Response to one sub-request, matched back by correlation id."""

    id: str
    status: int
    body: dict[str, Any] | None = None

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> str:
        """Correlation ids are strings on the wire but some gateways echo ints."""
        return str(v)

    @property
    def ok(self) -> bool:
        return self.status == 200

    def page(self) -> PageResult:
        """Decode the body as a page; an absent body is an empty last page."""
        if not self.body:
            return PageResult()
        return PageResult.model_validate(self.body)

    def error_message(self) -> str | None:
        """Best-effort error message from an OData error body."""
        if not self.body:
            return None
        error = self.body.get("error")
        if isinstance(error, dict):
            return error.get("message") or error.get("code")
        return None

    model_config = ConfigDict(frozen=True)


class BatchResponse(BaseModel):
    """Batch envelope. Response order is not guaranteed to match the request order."""

    responses: list[BatchSubResponse] = Field(default_factory=list)

    def by_id(self) -> dict[str, BatchSubResponse]:
        """Index sub-responses by correlation id."""
        return {r.id: r for r in self.responses}

    model_config = ConfigDict(frozen=True)


def batch_payload(requests: list[BatchSubRequest]) -> dict[str, Any]:
    """JSON body for POST {base_uri}/$batch."""
    return {"requests": [r.model_dump() for r in requests]}
