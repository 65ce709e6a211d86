"""HTTP client helper."""

from __future__ import annotations

import asyncio
import inspect
import logging
import time
from collections.abc import Awaitable, Callable
from typing import Any

import aiohttp

from ...core.exceptions import ProviderError, RateLimitError

logger = logging.getLogger(__name__)

# Hook receives the raw response and may return a delay (seconds) to throttle
# subsequent requests.
ResponseHook = Callable[[aiohttp.ClientResponse], "float | None | Awaitable[float | None]"]

_RATE_LIMIT_STATUSES = (429, 418)


class HTTPClient:
    """Async HTTP client wrapper.

    Retries only on throttling responses (429/418), honouring Retry-After,
    up to ``max_rate_limit_retries`` times. Every other failure is raised as
    ProviderError for the caller to handle.
    """

    def __init__(
        self,
        timeout: float = 30.0,
        *,
        max_rate_limit_retries: int = 3,
        fallback_retry_after: float = 1.0,
    ) -> None:
        self.timeout = aiohttp.ClientTimeout(total=timeout)
        self.max_rate_limit_retries = max_rate_limit_retries
        self.fallback_retry_after = fallback_retry_after
        self._session: aiohttp.ClientSession | None = None
        self._response_hooks: list[ResponseHook] = []
        self._throttle_until: float | None = None

    @property
    def session(self) -> aiohttp.ClientSession:
        """Get or create session."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self.timeout)
        return self._session

    def add_response_hook(self, hook: ResponseHook) -> None:
        """Register a hook called with every response."""
        self._response_hooks.append(hook)

    def set_throttle(self, delay: float) -> None:
        """Hold off further requests for ``delay`` seconds (extends, never shortens)."""
        if delay <= 0:
            return
        until = time.time() + delay
        if self._throttle_until is None or until > self._throttle_until:
            self._throttle_until = until

    async def _wait_for_throttle(self) -> None:
        if self._throttle_until is None:
            return
        remaining = self._throttle_until - time.time()
        if remaining > 0:
            await asyncio.sleep(remaining)
        self._throttle_until = None

    async def _run_hooks(self, response: aiohttp.ClientResponse) -> None:
        for hook in self._response_hooks:
            try:
                result = hook(response)
                if inspect.isawaitable(result):
                    result = await result
                if result:
                    self.set_throttle(float(result))
            except Exception as e:  # hooks must never break a request
                logger.debug(f"Response hook failed: {e}")

    def _retry_after(self, response: aiohttp.ClientResponse) -> float:
        value = response.headers.get("Retry-After") if response.headers else None
        try:
            return float(value) if value is not None else self.fallback_retry_after
        except (TypeError, ValueError):
            return self.fallback_retry_after

    async def _request(
        self,
        method: str,
        url: str,
        **kwargs: Any,
    ) -> Any:
        attempt = 0
        while True:
            await self._wait_for_throttle()
            try:
                async with self.session.request(method, url, **kwargs) as response:
                    await self._run_hooks(response)
                    if response.status in _RATE_LIMIT_STATUSES:
                        retry_after = self._retry_after(response)
                        if attempt >= self.max_rate_limit_retries:
                            raise RateLimitError(
                                f"{method} {url} throttled after {attempt + 1} attempts",
                                retry_after=retry_after,
                            )
                        attempt += 1
                        logger.warning(
                            "request_throttled",
                            extra={
                                "url": url,
                                "status": response.status,
                                "retry_after": retry_after,
                                "attempt": attempt,
                            },
                        )
                        self.set_throttle(retry_after)
                        continue
                    if response.status >= 400:
                        text = await response.text()
                        raise ProviderError(
                            f"{method} {url} failed with HTTP {response.status}: {text[:500]}",
                            status_code=response.status,
                        )
                    return await response.json()
            except aiohttp.ClientError as e:
                raise ProviderError(f"{method} {url} failed: {e}") from e
            except asyncio.TimeoutError as e:
                raise ProviderError(f"{method} {url} timed out") from e

    async def get(
        self,
        url: str,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        """GET request."""
        return await self._request("GET", url, params=params, headers=headers)

    async def post(
        self,
        url: str,
        json: Any = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        """POST request with a JSON body."""
        return await self._request("POST", url, json=json, headers=headers)

    async def close(self) -> None:
        """Close session."""
        if self._session and not self._session.closed:
            await self._session.close()

    async def __aenter__(self) -> HTTPClient:
        """Context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit."""
        await self.close()
