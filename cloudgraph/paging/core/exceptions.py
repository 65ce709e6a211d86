"""Custom exception hierarchy."""

from __future__ import annotations


class PagingError(Exception):
    """Base exception for all library errors."""

    pass


class NotConnectedError(PagingError):
    """No active session is available.

    Raised before any request is made; no partial result exists.
    """

    pass


class ProviderError(PagingError):
    """Error from the directory API or the HTTP layer."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code


class RateLimitError(ProviderError):
    """Provider rate limit exceeded and retries exhausted."""

    def __init__(self, message: str, retry_after: float = 60) -> None:
        super().__init__(message, status_code=429)
        self.retry_after = retry_after


class FirstPageError(PagingError):
    """The initial, unbatched page request failed.

    The underlying transport error is available as ``__cause__`` and its
    status code (when known) as ``status_code``.
    """

    def __init__(self, message: str, url: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class BatchContractError(PagingError, AssertionError):
    """A batch was built with more sub-requests than the API accepts.

    This is a programming error in the caller of the builder, never a
    condition a user can trigger.
    """

    pass
