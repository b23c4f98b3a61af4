import pytest
import httpx
from dtrack import DTrackClient, AsyncDTrackClient

# ── Global Config ─────────────────────────────────────────────────────────────
BASE_URL = "http://dtrack.test"
API_KEY = "odt_test_key"
PROJECT_UUID = "3a4f1c1e-6a67-4f2b-9a66-1f3a9c2b7d10"
PARENT_UUID = "b7f0b2d4-1a2e-4c5d-8e9f-0a1b2c3d4e5f"


def project_json(**overrides) -> dict:
    """A project as the API server returns it."""
    data = {
        "uuid": PROJECT_UUID,
        "name": "acme-app",
        "version": "1.2.0",
        "classifier": "APPLICATION",
        "active": True,
        "tags": [{"name": "critical"}],
        "lastBomImport": 1700000000000,
        "metrics": {"critical": 1, "high": 2, "inheritedRiskScore": 17.0},
        "lastInheritedRiskScore": 17.0,  # not modelled, must be ignored
    }
    data.update(overrides)
    return data


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def make_client():
    """
    Return a factory building a DTrackClient whose requests are answered by
    ``handler`` through httpx.MockTransport. The server version is pinned
    to 4.12.0 unless overridden.
    """
    clients = []

    def _make(handler, **kwargs) -> DTrackClient:
        kwargs.setdefault("server_version", "4.12.0")
        client = DTrackClient(
            base_url=BASE_URL,
            api_key=API_KEY,
            transport=httpx.MockTransport(handler),
            **kwargs,
        )
        clients.append(client)
        return client

    yield _make
    for client in clients:
        client.close()


@pytest.fixture
def make_async_client():
    """Async counterpart of ``make_client``; close it with ``async with``."""

    def _make(handler, **kwargs) -> AsyncDTrackClient:
        kwargs.setdefault("server_version", "4.12.0")
        return AsyncDTrackClient(
            base_url=BASE_URL,
            api_key=API_KEY,
            transport=httpx.MockTransport(handler),
            **kwargs,
        )

    return _make
