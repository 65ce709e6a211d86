"""Core enumerations shared across the paging runtime.

Architecture:
    This module defines the standardized enums used by the resolver, the
    continuation extractors and the caller-facing options. String enums keep
    values readable in logs and easy to parse from CLI flags or environment
    variables.

Key Types:
    - CloudEnvironment: National cloud a session is connected to
    - ContinuationStrategy: How continuation markers are captured from pages
"""

from enum import Enum
from typing import Optional


class CloudEnvironment(str, Enum):
    """National cloud environment of an authenticated session.

    Unknown tags are not an error: the resolver falls back to the global
    cloud for anything it does not recognise.
    """

    GLOBAL = "Global"
    USGOV = "USGov"
    USGOV_DOD = "USGovDoD"
    CHINA = "China"
    GERMANY = "Germany"

    @classmethod
    def from_str(cls, tag: str) -> Optional["CloudEnvironment"]:
        """Get environment from its tag (case-insensitive). Returns None if no match."""
        for env in cls:
            if env.value.lower() == tag.strip().lower():
                return env
        return None


class ContinuationStrategy(str, Enum):
    """How a continuation marker is captured from a page.

    TOKEN keeps only the skip token and rebuilds the request URL from the
    known endpoint, page size and filter. URL keeps the whole next link,
    which already carries its own query state.
    """

    TOKEN = "token"
    URL = "url"
