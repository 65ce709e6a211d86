"""Shared fixtures: an in-memory directory API speaking pages and $batch."""

from __future__ import annotations

from collections.abc import Sequence
from urllib.parse import parse_qs, urlsplit

import pytest

from cloudgraph.paging import CloudEnvironment, GraphSession
from cloudgraph.paging.models import BatchResponse, BatchSubRequest, PageResult

BASE_URI = "https://graph.microsoft.com/v1.0"


def make_records(endpoint: str, count: int) -> list[dict]:
    return [{"id": f"{endpoint}-{i}", "displayName": f"{endpoint} {i}"} for i in range(count)]


class FakeDirectory:
    """Serves collections in pages of $top records with X<offset> skip tokens.

    Satisfies the DirectoryTransport protocol. Every GET and $batch call is
    recorded; ``fail_offsets`` maps a page offset to the status its
    sub-request should return, ``drop_offsets`` makes the sub-response for
    that offset disappear from the batch.
    """

    def __init__(
        self,
        collections: dict[str, list[dict]],
        *,
        base_uri: str = BASE_URI,
        fail_offsets: dict[int, int] | None = None,
        drop_offsets: set[int] | None = None,
    ) -> None:
        self.collections = collections
        self.base_uri = base_uri
        self.fail_offsets = fail_offsets or {}
        self.drop_offsets = drop_offsets or set()
        self.get_calls: list[str] = []
        self.batch_calls: list[list[BatchSubRequest]] = []
        self.batch_urls: list[str] = []

    def _parse(self, url: str) -> tuple[str, int, str | None, int]:
        parts = urlsplit(url)
        path = parts.path
        version_prefix = urlsplit(self.base_uri).path
        if path.startswith(version_prefix):
            path = path[len(version_prefix) :]
        endpoint = path.strip("/")
        query = parse_qs(parts.query)
        top = int(query["$top"][0])
        filter_ = query.get("$filter", [None])[0]
        token = query.get("$skiptoken", ["X0"])[0]
        return endpoint, top, filter_, int(token[1:])

    def _page_body(self, endpoint: str, top: int, filter_: str | None, offset: int) -> dict:
        records = self.collections[endpoint]
        items = records[offset : offset + top]
        body: dict = {"value": items}
        next_offset = offset + top
        if next_offset < len(records):
            link = f"{self.base_uri}/{endpoint}?$top={top}"
            if filter_:
                link += f"&$filter={filter_}"
            body["@odata.nextLink"] = f"{link}&$skiptoken=X{next_offset}"
        return body

    async def get_page(self, url: str) -> PageResult:
        self.get_calls.append(url)
        endpoint, top, filter_, offset = self._parse(url)
        return PageResult.model_validate(self._page_body(endpoint, top, filter_, offset))

    async def post_batch(self, url: str, requests: Sequence[BatchSubRequest]) -> BatchResponse:
        self.batch_urls.append(url)
        self.batch_calls.append(list(requests))
        responses = []
        for request in requests:
            endpoint, top, filter_, offset = self._parse(request.url)
            if offset in self.drop_offsets:
                continue
            if offset in self.fail_offsets:
                status = self.fail_offsets[offset]
                responses.append(
                    {
                        "id": request.id,
                        "status": status,
                        "body": {"error": {"code": "Request_BadRequest", "message": "bad"}},
                    }
                )
                continue
            responses.append(
                {
                    "id": request.id,
                    "status": 200,
                    "body": self._page_body(endpoint, top, filter_, offset),
                }
            )
        # Real gateways do not preserve request order
        responses.reverse()
        return BatchResponse.model_validate({"responses": responses})


@pytest.fixture
def session() -> GraphSession:
    return GraphSession(environment=CloudEnvironment.GLOBAL, access_token="test-token")


@pytest.fixture
def widgets_directory() -> FakeDirectory:
    """5 widgets; with page size 2 they come back as pages of [2, 2, 1]."""
    return FakeDirectory({"widgets": make_records("widgets", 5)})


@pytest.fixture
def directory_factory():
    """Build a FakeDirectory from {endpoint: record_count}."""

    def factory(sizes: dict[str, int], **kwargs) -> FakeDirectory:
        return FakeDirectory({name: make_records(name, n) for name, n in sizes.items()}, **kwargs)

    return factory
