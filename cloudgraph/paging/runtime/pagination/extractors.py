"""Continuation marker extraction from page responses.

Both strategies return zero or one marker per page: the API emits at most
one next link per response, and its absence means the branch has reached
its last page.

Under the token strategy a next link without a skip token is kept whole, as
a URL marker, so the branch is not cut short.
"""

from __future__ import annotations

import re

from ...core.enums import ContinuationStrategy
from ...models import PageResult
from .definitions import ContinuationMarker
from .telemetry import log_link_without_token

_SKIPTOKEN_RE = re.compile(r"(?:^|[?&])\$?skiptoken=([^&#]*)", re.IGNORECASE)


def extract_skip_token(next_link: str | None) -> str | None:
    """Pull the skip token out of a next link.

    The token is returned as it appears in the link (still URL-encoded) so
    it can be placed back into a request URL unchanged.

    Examples:
        >>> extract_skip_token("https://host/v1.0/users?$top=5&$skiptoken=ABC123")
        'ABC123'
        >>> extract_skip_token("skiptoken=ABC123&foo=bar")
        'ABC123'
        >>> extract_skip_token("https://host/v1.0/users?$top=5") is None
        True
    """
    if not next_link:
        return None
    match = _SKIPTOKEN_RE.search(next_link)
    if match is None or not match.group(1):
        return None
    return match.group(1)


class ContinuationExtractor:
    """Captures the continuation marker of a page per the configured strategy."""

    def __init__(self, strategy: ContinuationStrategy = ContinuationStrategy.TOKEN) -> None:
        self.strategy = ContinuationStrategy(strategy)

    def extract(self, page: PageResult) -> list[ContinuationMarker]:
        """Return the page's continuation marker, if any.

        Args:
            page: Decoded page

        Returns:
            Empty list on the last page, otherwise a single marker
        """
        if not page.next_link:
            return []

        if self.strategy == ContinuationStrategy.URL:
            return [ContinuationMarker.from_url(page.next_link)]

        token = extract_skip_token(page.next_link)
        if token is None:
            # Paged by some other parameter; the link itself still resumes the listing
            log_link_without_token(next_link=page.next_link)
            return [ContinuationMarker.from_url(page.next_link)]
        return [ContinuationMarker.from_token(token)]
