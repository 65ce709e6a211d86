"""Page data model."""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class PageResult(BaseModel):
    """One page of a collection listing.

    Decoded once at the transport boundary from the API's JSON shape
    (``value`` and ``@odata.nextLink``).
    """

    items: list[dict[str, Any]] = Field(default_factory=list, alias="value")
    next_link: Optional[str] = Field(default=None, alias="@odata.nextLink")

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")
