"""
Client, configuration, error mapping and version handling tests.

Mocked with httpx.MockTransport; does NOT require a running server.
"""

import logging

import httpx
import pytest
from packaging.version import Version

import dtrack
from dtrack import DTrackClient
from dtrack.client import expand_path
from dtrack.exceptions import (
    AuthenticationError,
    BadRequestError,
    DecodeError,
    DTrackError,
    PermissionError,
    ServerError,
    raise_for_status,
)
from dtrack.types import About
from dtrack.versioning import is_at_least, parse_version


# ──────────────────────────────────────────────
# 1. Client Initialization
# ──────────────────────────────────────────────


class TestClientInit:
    def test_basic_init(self, monkeypatch):
        monkeypatch.delenv("DTRACK_URL", raising=False)
        client = DTrackClient(api_key="odt_key")
        assert client.base_url == "http://localhost:8081"
        assert client.server_version is None

    def test_trailing_slash_is_stripped(self):
        client = DTrackClient(base_url="https://dtrack.example.com/", api_key="k")
        assert client.base_url == "https://dtrack.example.com"

    def test_env_vars(self, monkeypatch):
        """DTRACK_URL and DTRACK_API_KEY configure the client when arguments are omitted."""
        monkeypatch.setenv("DTRACK_URL", "https://env.example.com")
        monkeypatch.setenv("DTRACK_API_KEY", "odt_env")

        def handler(request):
            assert request.headers["X-Api-Key"] == "odt_env"
            return httpx.Response(200, json={"version": "4.12.0"})

        client = DTrackClient(transport=httpx.MockTransport(handler))
        assert client.base_url == "https://env.example.com"
        client.about.get()

    def test_missing_credentials(self, monkeypatch):
        monkeypatch.delenv("DTRACK_API_KEY", raising=False)
        with pytest.raises(DTrackError):
            DTrackClient()

    def test_bearer_token(self, monkeypatch):
        monkeypatch.delenv("DTRACK_API_KEY", raising=False)

        def handler(request):
            assert request.headers["Authorization"] == "Bearer jwt-token"
            assert "X-Api-Key" not in request.headers
            return httpx.Response(200, json={"version": "4.12.0"})

        client = DTrackClient(bearer_token="jwt-token", transport=httpx.MockTransport(handler))
        client.about.get()

    def test_explicit_bearer_beats_env_api_key(self, monkeypatch):
        monkeypatch.setenv("DTRACK_API_KEY", "odt_env")
        client = DTrackClient(bearer_token="jwt-token")
        assert client._http.headers["Authorization"] == "Bearer jwt-token"

    def test_pinned_server_version(self):
        client = DTrackClient(api_key="k", server_version="4.11.0")
        assert client.server_version == Version("4.11.0")

    def test_user_agent(self):
        client = DTrackClient(api_key="k")
        assert client._http.headers["User-Agent"] == f"dtrack-python/{dtrack.__version__}"

    def test_repr(self):
        client = DTrackClient(base_url="http://dt:8081", api_key="k")
        assert "DTrackClient" in repr(client)
        assert "http://dt:8081" in repr(client)

    def test_context_manager_closes(self):
        with DTrackClient(api_key="k") as client:
            assert not client._http.is_closed
        assert client._http.is_closed

    def test_resources_are_cached(self):
        client = DTrackClient(api_key="k")
        assert client.projects is client.projects


# ──────────────────────────────────────────────
# 2. Server Version
# ──────────────────────────────────────────────


class TestServerVersion:
    def test_about(self, make_client):
        def handler(request):
            assert request.url.path == "/api/version"
            return httpx.Response(200, json={
                "application": "Dependency-Track",
                "version": "4.11.4",
                "timestamp": "2024-06-01T10:00:00Z",
                "uuid": "e3a2f4a6-0000-4000-8000-000000000000",
                "framework": {"name": "Alpine", "version": "2.2.5"},
            })

        about = make_client(handler).about.get()
        assert isinstance(about, About)
        assert about.version == "4.11.4"
        assert about.framework["name"] == "Alpine"

    def test_detect_server_version(self, make_client):
        def handler(request):
            return httpx.Response(200, json={"version": "4.12.1"})

        client = make_client(handler, server_version=None)
        assert client.detect_server_version() == Version("4.12.1")
        assert client.server_version == Version("4.12.1")

    def test_is_server_version_at_least(self, make_client):
        client = make_client(lambda request: httpx.Response(500), server_version="4.11.0")
        assert client.is_server_version_at_least("4.11.0")
        assert client.is_server_version_at_least("4.10.9")
        assert not client.is_server_version_at_least("4.12.0")

    def test_detection_failure_propagates(self, make_client):
        def handler(request):
            return httpx.Response(503, text="maintenance")

        client = make_client(handler, server_version=None)
        with pytest.raises(ServerError):
            client.is_server_version_at_least("4.11.0")

    def test_unknown_version_without_detection(self, make_client):
        client = make_client(lambda request: httpx.Response(500), server_version=None, detect_server_version=False)
        assert client.is_server_version_at_least("1.0.0") is False


class TestVersioning:
    def test_numeric_ordering(self):
        assert parse_version("4.9.0") < parse_version("4.11.0")
        assert parse_version("4.100.0") > parse_version("4.11.0")

    def test_snapshot_suffix(self):
        """Maven-style development builds compare by their release part."""
        assert parse_version("4.11.0-SNAPSHOT") == Version("4.11.0")
        assert is_at_least(parse_version("4.12.0-SNAPSHOT"), "4.11.0")

    def test_leading_v(self):
        assert parse_version("v4.11.0") == Version("4.11.0")

    def test_garbage_is_rejected(self):
        with pytest.raises(ValueError):
            parse_version("not-a-version")

    def test_unknown_is_never_at_least(self):
        assert is_at_least(None, "0.0.1") is False


# ──────────────────────────────────────────────
# 3. Events
# ──────────────────────────────────────────────


class TestEvents:
    @pytest.mark.parametrize("processing", [True, False])
    def test_is_being_processed(self, make_client, processing):
        def handler(request):
            assert request.url.path == "/api/v1/event/token/8e2a0d41"
            return httpx.Response(200, json={"processing": processing})

        assert make_client(handler).events.is_being_processed("8e2a0d41") is processing

    def test_unexpected_body(self, make_client):
        def handler(request):
            return httpx.Response(200, json={"status": "done"})

        with pytest.raises(DecodeError):
            make_client(handler).events.is_being_processed("8e2a0d41")


# ──────────────────────────────────────────────
# 4. Error Handling
# ──────────────────────────────────────────────


class TestErrorHandling:
    @pytest.mark.parametrize("status,exc_type", [
        (400, BadRequestError),
        (401, AuthenticationError),
        (403, PermissionError),
        (418, DTrackError),
        (500, ServerError),
        (502, ServerError),
    ])
    def test_status_mapping(self, make_client, status, exc_type):
        def handler(request):
            return httpx.Response(status, text="nope")

        with pytest.raises(exc_type) as exc:
            make_client(handler).projects.get_all()
        assert exc.value.status_code == status
        assert exc.value.response.status_code == status

    def test_problem_detail_message(self):
        response = httpx.Response(
            400,
            json={"status": 400, "title": "Bad Request", "detail": "version must not be blank"},
        )
        with pytest.raises(BadRequestError) as exc:
            raise_for_status(response)
        assert "version must not be blank" in str(exc.value)

    def test_success_does_not_raise(self):
        raise_for_status(httpx.Response(204))

    def test_all_errors_share_a_base(self):
        assert issubclass(ServerError, DTrackError)
        assert issubclass(DecodeError, DTrackError)

    def test_repr(self):
        err = AuthenticationError("Authentication failed: bad key", status_code=401)
        assert "AuthenticationError" in repr(err)
        assert "status_code=401" in repr(err)

    def test_transport_errors_propagate_unchanged(self, make_client):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(httpx.ConnectError):
            make_client(handler).projects.get_all()


# ──────────────────────────────────────────────
# 5. Path templates and logging
# ──────────────────────────────────────────────


class TestExpandPath:
    def test_fills_placeholders(self):
        assert expand_path("/api/v1/project/{uuid}", uuid="abc") == "/api/v1/project/abc"

    def test_escapes_reserved_characters(self):
        assert expand_path("/api/v1/project/tag/{tag}", tag="a/b c") == "/api/v1/project/tag/a%2Fb%20c"


class TestLogging:
    def test_requests_are_logged_at_debug(self, make_client, caplog):
        def handler(request):
            return httpx.Response(200, json=[], headers={"X-Total-Count": "0"})

        with caplog.at_level(logging.DEBUG, logger="dtrack"):
            make_client(handler).projects.get_all()

        messages = [r.getMessage() for r in caplog.records if r.name == "dtrack"]
        assert any("GET" in m and "/api/v1/project" in m for m in messages)
        assert any("200" in m for m in messages)

    def test_start_time_travels_with_the_request(self, make_client, caplog):
        """Timing lives on the request, so a failed request leaves nothing behind."""
        calls = []

        def handler(request):
            assert "dtrack_started" in request.extensions
            calls.append(request)
            if len(calls) == 1:
                raise httpx.ConnectError("connection refused", request=request)
            return httpx.Response(200, json=[], headers={"X-Total-Count": "0"})

        client = make_client(handler)
        with caplog.at_level(logging.DEBUG, logger="dtrack"):
            with pytest.raises(httpx.ConnectError):
                client.projects.get_all()
            client.projects.get_all()

        messages = [r.getMessage() for r in caplog.records if r.name == "dtrack"]
        assert sum("→ GET" in m for m in messages) == 2
        assert sum("← 200" in m for m in messages) == 1

    def test_logging_module_is_documented(self):
        from dtrack import _logging
        assert _logging.__doc__
        assert _logging.logger.name == "dtrack"
