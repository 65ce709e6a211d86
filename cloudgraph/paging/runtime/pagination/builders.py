"""Batch request construction for continuation markers."""

from __future__ import annotations

import re
from collections.abc import Sequence
from urllib.parse import urlsplit

from ...config import MAX_BATCH_REQUESTS
from ...core.exceptions import BatchContractError
from ...models import BatchSubRequest
from .definitions import CollectionQuery, ContinuationMarker

_VERSION_SEGMENT_RE = re.compile(r"^(?:v\d+(?:\.\d+)?|beta)$", re.IGNORECASE)


def strip_to_batch_url(next_link: str) -> str:
    """Turn an absolute next link into a relative, version-less batch URL.

    Examples:
        >>> strip_to_batch_url("https://graph.microsoft.com/v1.0/users?$top=5&$skiptoken=X")
        '/users?$top=5&$skiptoken=X'
        >>> strip_to_batch_url("https://graph.microsoft.com/beta/groups/1/members?$skiptoken=Y")
        '/groups/1/members?$skiptoken=Y'
    """
    parts = urlsplit(next_link)
    segments = [s for s in parts.path.split("/") if s]
    if segments and _VERSION_SEGMENT_RE.match(segments[0]):
        segments = segments[1:]
    url = "/" + "/".join(segments)
    if parts.query:
        url += f"?{parts.query}"
    return url


class BatchRequestBuilder:
    """Builds one $batch request from up to MAX_BATCH_REQUESTS markers.

    The builder never truncates; chunking to the ceiling is the runner's job.
    """

    def __init__(self, query: CollectionQuery) -> None:
        self._query = query

    def url_for(self, marker: ContinuationMarker) -> str:
        """Relative sub-request URL for one marker."""
        if marker.token is not None:
            return self._query.page_path(skip_token=marker.token)
        return strip_to_batch_url(marker.url or "")

    def build(self, markers: Sequence[ContinuationMarker]) -> list[BatchSubRequest]:
        """Build sub-requests with correlation ids "1".."k" in input order.

        Raises:
            BatchContractError: If more than MAX_BATCH_REQUESTS markers are given
        """
        if len(markers) > MAX_BATCH_REQUESTS:
            raise BatchContractError(
                f"Cannot batch {len(markers)} requests; the limit is {MAX_BATCH_REQUESTS}"
            )
        return [
            BatchSubRequest(id=str(i), method="GET", url=self.url_for(marker))
            for i, marker in enumerate(markers, start=1)
        ]

