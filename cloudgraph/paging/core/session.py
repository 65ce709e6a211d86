"""Explicit session context passed to the resolver and the transport."""

from __future__ import annotations

from dataclasses import dataclass, field

from .enums import CloudEnvironment


@dataclass(frozen=True)
class GraphSession:
    """An authenticated connection to one tenant.

    The library never acquires or refreshes credentials; the access token is
    whatever the caller's auth flow produced and is only forwarded.

    Attributes:
        environment: Environment tag (a CloudEnvironment or any raw string)
        access_token: Bearer token forwarded on every request (optional)
        tenant_id: Tenant identifier, informational only
    """

    environment: CloudEnvironment | str = CloudEnvironment.GLOBAL
    access_token: str | None = field(default=None, repr=False)
    tenant_id: str | None = None

    def auth_headers(self) -> dict[str, str]:
        """Headers carrying this session's auth context."""
        if not self.access_token:
            return {}
        return {"Authorization": f"Bearer {self.access_token}"}
