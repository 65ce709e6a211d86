"""Shared directory API constants and base URI resolution.

This module centralizes the national cloud roots, API limits and default
fetch settings so the runtime modules can stay small and focused.
"""

from __future__ import annotations

from .core.enums import CloudEnvironment
from .core.exceptions import NotConnectedError
from .core.session import GraphSession

# National cloud API roots
# The version segment is appended by get_base_uri().
BASE_URLS = {
    CloudEnvironment.GLOBAL: "https://graph.microsoft.com",
    CloudEnvironment.USGOV: "https://graph.microsoft.us",
    CloudEnvironment.USGOV_DOD: "https://dod-graph.microsoft.us",
    CloudEnvironment.CHINA: "https://microsoftgraph.chinacloudapi.cn",
    CloudEnvironment.GERMANY: "https://graph.microsoft.de",
}

DEFAULT_API_VERSION = "v1.0"

# Hard ceiling imposed by the $batch endpoint, not a tunable
MAX_BATCH_REQUESTS = 20

# Documented page cap of the collection endpoints
MAX_PAGE_SIZE = 999
DEFAULT_PAGE_SIZE = 999

MAX_CONCURRENT_JOBS = 20
DEFAULT_MAX_CONCURRENT_JOBS = 8

DEFAULT_MEMORY_THRESHOLD_MB = 100

# Rough per-record footprint used by the memory guard (not a measurement)
ESTIMATED_BYTES_PER_RECORD = 2048


def get_base_uri(
    environment: CloudEnvironment | str | None,
    api_version: str = DEFAULT_API_VERSION,
) -> str:
    """Get the versioned API root for an environment tag.

    Args:
        environment: Environment enum or raw tag; unknown values are allowed
        api_version: Version path segment (e.g. "v1.0" or "beta")

    Returns:
        Base URI without a trailing slash

    Examples:
        >>> get_base_uri(CloudEnvironment.USGOV)
        'https://graph.microsoft.us/v1.0'
        >>> get_base_uri("Mars", api_version="beta")
        'https://graph.microsoft.com/beta'
    """
    if isinstance(environment, CloudEnvironment):
        env = environment
    elif isinstance(environment, str):
        env = CloudEnvironment.from_str(environment)
    else:
        env = None

    # Fallback to the global cloud for anything unrecognised
    root = BASE_URLS.get(env) if env is not None else None
    if root is None:
        root = BASE_URLS[CloudEnvironment.GLOBAL]
    return f"{root}/{api_version.strip('/')}"


def resolve_base_uri(session: GraphSession | None, api_version: str = DEFAULT_API_VERSION) -> str:
    """Get the base URI for the session's environment.

    Raises:
        NotConnectedError: If there is no session
    """
    if session is None:
        raise NotConnectedError("Not connected: no active session to resolve the API base URI")
    return get_base_uri(session.environment, api_version=api_version)
