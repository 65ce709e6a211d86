"""Unit tests for HTTPClient.

Tests focus on session management, throttling, response hooks, rate limiting
and error mapping.
"""

from __future__ import annotations

import asyncio
import time
from unittest.mock import AsyncMock, MagicMock

import aiohttp
import pytest

from cloudgraph.paging.core import ProviderError, RateLimitError
from cloudgraph.paging.runtime.rest import HTTPClient


def mock_response(status: int = 200, json=None, headers=None, text: str = "") -> AsyncMock:
    response = AsyncMock()
    response.status = status
    response.headers = headers or {}
    response.json = AsyncMock(return_value=json)
    response.text = AsyncMock(return_value=text)
    response.__aenter__ = AsyncMock(return_value=response)
    response.__aexit__ = AsyncMock(return_value=None)
    return response


def mock_session(*responses) -> MagicMock:
    session = MagicMock()
    session.closed = False  # session property checks this
    session.request = MagicMock(side_effect=list(responses))
    return session


class TestHTTPClientSessionManagement:
    """Test HTTPClient session management."""

    def test_init(self):
        """Test HTTPClient initialization."""
        client = HTTPClient(timeout=10.0)
        assert client.timeout.total == 10.0
        assert client._session is None
        assert client._response_hooks == []
        assert client._throttle_until is None
        assert client.max_rate_limit_retries == 3
        assert not hasattr(client, "base_url")

    @pytest.mark.asyncio
    async def test_session_property_creates_session(self):
        """Test session property creates session when needed."""
        client = HTTPClient()
        session = client.session
        assert isinstance(session, aiohttp.ClientSession)
        assert client._session is session
        await client.close()

    @pytest.mark.asyncio
    async def test_session_property_recreates_closed_session(self):
        """Test session property recreates closed session."""
        client = HTTPClient()
        session1 = client.session
        await session1.close()

        session2 = client.session
        assert session1 is not session2
        assert not session2.closed
        await client.close()

    @pytest.mark.asyncio
    async def test_close_idempotent(self):
        """Test close() can be called multiple times."""
        client = HTTPClient()
        await client.close()
        await client.close()

    @pytest.mark.asyncio
    async def test_context_manager(self):
        """Test HTTPClient as async context manager."""
        async with HTTPClient() as client:
            assert client.session is not None

        assert client._session is None or client._session.closed


class TestHTTPClientThrottling:
    """Test HTTPClient throttling functionality."""

    def test_set_throttle_zero_does_nothing(self):
        """Test set_throttle with 0 does nothing."""
        client = HTTPClient()
        client.set_throttle(5.0)
        original = client._throttle_until

        client.set_throttle(0.0)
        assert client._throttle_until == original

    def test_set_throttle_never_shortens(self):
        """Test a shorter throttle does not replace a longer one."""
        client = HTTPClient()
        client.set_throttle(10.0)
        first_end = client._throttle_until

        client.set_throttle(1.0)
        assert client._throttle_until == first_end

    @pytest.mark.asyncio
    async def test_get_respects_throttle(self):
        """Test get() waits for throttle before request."""
        client = HTTPClient()
        client.set_throttle(0.05)
        client._session = mock_session(mock_response(json={"value": []}))

        start = time.time()
        await client.get("https://graph.example.com/v1.0/users")
        elapsed = time.time() - start

        assert elapsed >= 0.04, f"Expected at least 0.04s, got {elapsed:.6f}s"
        assert client._throttle_until is None


class TestHTTPClientResponseHooks:
    """Test HTTPClient response hooks."""

    @pytest.mark.asyncio
    async def test_response_hook_called(self):
        """Test response hooks are called for each response."""
        client = HTTPClient()
        hook = MagicMock(return_value=None)
        client.add_response_hook(hook)
        response = mock_response(json={"value": []})
        client._session = mock_session(response)

        await client.get("https://graph.example.com/v1.0/users")

        hook.assert_called_once_with(response)

    @pytest.mark.asyncio
    async def test_async_hook_sets_throttle(self):
        """Test an async hook can return a delay."""
        client = HTTPClient()

        async def async_hook(response):
            await asyncio.sleep(0)
            return 1.0

        client.add_response_hook(async_hook)
        client._session = mock_session(mock_response(json={"value": []}))

        await client.get("https://graph.example.com/v1.0/users")

        assert client._throttle_until is not None

    @pytest.mark.asyncio
    async def test_response_hook_exception_handled(self):
        """Test response hook exceptions don't break requests."""
        client = HTTPClient()

        def failing_hook(response):
            raise RuntimeError("Hook error")

        client.add_response_hook(failing_hook)
        client._session = mock_session(mock_response(json={"value": [{"id": "1"}]}))

        result = await client.get("https://graph.example.com/v1.0/users")
        assert result == {"value": [{"id": "1"}]}


class TestHTTPClientRateLimiting:
    """Test HTTPClient rate limiting handling."""

    @pytest.mark.asyncio
    async def test_get_retries_429_with_retry_after(self):
        """Test a 429 is retried after Retry-After."""
        client = HTTPClient()
        session = mock_session(
            mock_response(429, headers={"Retry-After": "0.01"}),
            mock_response(json={"value": []}),
        )
        client._session = session

        result = await client.get("https://graph.example.com/v1.0/users")

        assert result == {"value": []}
        assert session.request.call_count == 2

    @pytest.mark.asyncio
    async def test_post_retries_418_without_retry_after(self):
        """Test the fallback delay is used when Retry-After is absent."""
        client = HTTPClient(fallback_retry_after=0.01)
        session = mock_session(mock_response(418), mock_response(json={"responses": []}))
        client._session = session

        result = await client.post("https://graph.example.com/v1.0/$batch", json={"requests": []})

        assert result == {"responses": []}
        assert session.request.call_args.args == ("POST", "https://graph.example.com/v1.0/$batch")

    @pytest.mark.asyncio
    async def test_rate_limit_retries_exhausted(self):
        """Test RateLimitError once the retry budget is spent."""
        client = HTTPClient(max_rate_limit_retries=1)
        session = mock_session(
            mock_response(429, headers={"Retry-After": "0"}),
            mock_response(429, headers={"Retry-After": "0"}),
        )
        client._session = session

        with pytest.raises(RateLimitError) as exc_info:
            await client.get("https://graph.example.com/v1.0/users")

        assert exc_info.value.status_code == 429
        assert session.request.call_count == 2


class TestHTTPClientErrors:
    """Test HTTPClient error mapping."""

    @pytest.mark.asyncio
    async def test_http_error_raises_provider_error(self):
        """Test a 4xx/5xx response becomes ProviderError with its status."""
        client = HTTPClient()
        client._session = mock_session(mock_response(403, text='{"error": {"code": "Forbidden"}}'))

        with pytest.raises(ProviderError) as exc_info:
            await client.get("https://graph.example.com/v1.0/users")

        assert exc_info.value.status_code == 403
        assert "Forbidden" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_client_error_wrapped(self):
        """Test aiohttp errors are wrapped in ProviderError."""
        client = HTTPClient()
        session = MagicMock()
        session.closed = False
        session.request = MagicMock(side_effect=aiohttp.ClientConnectionError("connection reset"))
        client._session = session

        with pytest.raises(ProviderError) as exc_info:
            await client.get("https://graph.example.com/v1.0/users")

        assert exc_info.value.status_code is None
        assert isinstance(exc_info.value.__cause__, aiohttp.ClientConnectionError)

    @pytest.mark.asyncio
    async def test_timeout_wrapped(self):
        """Test an expired request timeout surfaces as ProviderError."""
        client = HTTPClient(timeout=0.3)
        session = MagicMock()
        session.closed = False
        session.request = MagicMock(side_effect=asyncio.TimeoutError())
        client._session = session

        with pytest.raises(ProviderError) as exc_info:
            await client.post("https://graph.example.com/v1.0/$batch", json={"requests": []})

        assert exc_info.value.status_code is None
        assert "timed out" in str(exc_info.value)
        assert isinstance(exc_info.value.__cause__, asyncio.TimeoutError)
