"""Directory API transport: authenticated JSON GET and $batch POST."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, Protocol

from pydantic import ValidationError

from ...core.exceptions import ProviderError
from ...core.session import GraphSession
from ...models import BatchResponse, BatchSubRequest, PageResult, batch_payload
from .http_client import HTTPClient, ResponseHook

_JSON_HEADERS = {"Content-Type": "application/json", "Accept": "application/json"}


class DirectoryTransport(Protocol):
    """What the paging runtime needs from a transport.

    Any object with these two coroutines works (GraphTransport, a test
    double, a caller-supplied wrapper adding its own retry policy).
    """

    async def get_page(self, url: str) -> PageResult:
        """GET one page from an absolute URL.

        Raises:
            ProviderError: If the request fails
        """
        ...

    async def post_batch(self, url: str, requests: Sequence[BatchSubRequest]) -> BatchResponse:
        """POST a $batch request to an absolute URL.

        Raises:
            ProviderError: If the batch call itself fails
        """
        ...


class GraphTransport:
    """Thin wrapper over HTTPClient that speaks pages and batches.

    Forwards the session's auth context on every call and decodes responses
    into typed models once, here.
    """

    def __init__(
        self,
        session: GraphSession | None = None,
        *,
        timeout: float = 60.0,
        http: HTTPClient | None = None,
    ) -> None:
        self._session = session
        self._http = http or HTTPClient(timeout=timeout)

    @property
    def session(self) -> GraphSession | None:
        return self._session

    def add_response_hook(self, hook: ResponseHook) -> None:
        self._http.add_response_hook(hook)

    def _headers(self) -> dict[str, str]:
        headers = dict(_JSON_HEADERS)
        if self._session is not None:
            headers.update(self._session.auth_headers())
        return headers

    async def get_page(self, url: str) -> PageResult:
        data = await self._http.get(url, headers=self._headers())
        return _decode(PageResult, data, url)

    async def post_batch(self, url: str, requests: Sequence[BatchSubRequest]) -> BatchResponse:
        payload = batch_payload(list(requests))
        data = await self._http.post(url, json=payload, headers=self._headers())
        return _decode(BatchResponse, data, url)

    async def close(self) -> None:
        await self._http.close()

    async def __aenter__(self) -> GraphTransport:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()


def _decode(model: Any, data: Any, url: str) -> Any:
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise ProviderError(f"Unexpected response shape from {url}: {e}") from e
