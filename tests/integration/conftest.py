"""Shared fixtures for integration tests."""

import os

import pytest

from cloudgraph.paging import CloudEnvironment, GraphSession

# Skip all integration tests unless RUN_CLOUDGRAPH_NETWORK_TESTS=1
pytestmark = pytest.mark.skipif(
    os.environ.get("RUN_CLOUDGRAPH_NETWORK_TESTS") != "1",
    reason="Requires network access. Set RUN_CLOUDGRAPH_NETWORK_TESTS=1 to run",
)


@pytest.fixture
def live_session() -> GraphSession:
    token = os.environ.get("CLOUDGRAPH_ACCESS_TOKEN")
    if not token:
        pytest.skip("CLOUDGRAPH_ACCESS_TOKEN is not set")
    environment = CloudEnvironment.from_str(os.environ.get("CLOUDGRAPH_ENVIRONMENT", "Global"))
    return GraphSession(environment=environment or CloudEnvironment.GLOBAL, access_token=token)
