from __future__ import annotations
import httpx
from functools import cached_property
from typing import Dict, Optional, Union, TYPE_CHECKING
from urllib.parse import quote
import os
import time
from packaging.version import InvalidVersion, Version
from ._logging import log_request, log_response, logger
from .versioning import is_at_least, parse_version

if TYPE_CHECKING:
    from .resources.about import AboutResource, AsyncAboutResource
    from .resources.events import EventsResource, AsyncEventsResource
    from .resources.projects import ProjectsResource, AsyncProjectsResource

DEFAULT_BASE_URL = "http://localhost:8081"


def _auth_headers(api_key: Optional[str], bearer_token: Optional[str]) -> Dict[str, str]:
    if api_key:
        return {"X-Api-Key": api_key}
    if bearer_token:
        return {"Authorization": f"Bearer {bearer_token}"}
    api_key = os.environ.get("DTRACK_API_KEY")
    if api_key:
        return {"X-Api-Key": api_key}
    from .exceptions import DTrackError
    raise DTrackError("No credentials provided. Pass api_key=, bearer_token= or set DTRACK_API_KEY env var.")


def _reported_version(about) -> Version:
    try:
        return parse_version(about.version)
    except InvalidVersion as e:
        from .exceptions import DecodeError
        raise DecodeError(f"Server reported an unparseable version: {about.version!r}") from e


def expand_path(template: str, **path_params: object) -> str:
    """
    Fill ``{name}`` placeholders in a path template.

    Values are percent-encoded as a single path segment, so a ``/`` inside
    a tag name cannot change which endpoint is hit.
    """
    return template.format(**{k: quote(str(v), safe="") for k, v in path_params.items()})


class DTrackClient:
    """
    Dependency-Track REST API client.

        client = DTrackClient(base_url="https://dtrack.example.com", api_key="odt_...")
        project = client.projects.lookup("acme-app", "1.2.0")

    Version-gated operations consult the server version. It is fetched from
    ``/api/version`` on first need, or can be pinned with ``server_version=``.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        bearer_token: Optional[str] = None,
        server_version: Optional[str] = None,
        detect_server_version: bool = True,
        timeout: float = 30.0,
        max_retries: int = 2,
        **kwargs,
    ):
        """
        Args:
            base_url: Dependency-Track API server URL (default: http://localhost:8081 or DTRACK_URL env var)
            api_key: Team API key, sent as X-Api-Key. Defaults to DTRACK_API_KEY env var.
            bearer_token: JWT for user sessions, used when no API key is given.
            server_version: Pin the server version instead of asking the server.
            detect_server_version: Query /api/version the first time a version-gated call needs it.
            timeout: Request timeout in seconds (default: 30)
            max_retries: Number of connection retries (default: 2)
            **kwargs: Additional arguments passed to httpx.Client
        """
        headers = _auth_headers(api_key, bearer_token)
        base_url = base_url or os.environ.get("DTRACK_URL", DEFAULT_BASE_URL)

        self.base_url = base_url.rstrip("/")
        self._detect_server_version = detect_server_version
        self._server_version: Optional[Version] = (
            parse_version(server_version) if server_version else None
        )

        headers["Accept"] = "application/json"
        from . import __version__
        headers["User-Agent"] = f"dtrack-python/{__version__}"

        # Only set retry transport if user hasn't provided their own transport
        if "transport" not in kwargs and max_retries > 0:
            kwargs["transport"] = httpx.HTTPTransport(retries=max_retries)

        def _log_req(request: httpx.Request):
            request.extensions["dtrack_started"] = time.perf_counter()
            log_request(request.method, str(request.url))

        def _log_res(response: httpx.Response):
            start = response.request.extensions.get("dtrack_started", time.perf_counter())
            elapsed = (time.perf_counter() - start) * 1000
            log_response(response.status_code, str(response.url), elapsed)

        self._http = httpx.Client(
            base_url=self.base_url,
            headers=headers,
            timeout=timeout,
            event_hooks={"request": [_log_req], "response": [_log_res]},
            **kwargs,
        )

    def __repr__(self) -> str:
        return f"DTrackClient(base_url={self.base_url!r})"

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.close()

    def close(self):
        """Close the underlying HTTP connection pool."""
        self._http.close()

    # ── Server Version ─────────────────────────────────────────

    @property
    def server_version(self) -> Optional[Version]:
        """The server version, if it has been detected or pinned."""
        return self._server_version

    def detect_server_version(self) -> Version:
        """Ask the server for its version and remember it."""
        about = self.about.get()
        self._server_version = _reported_version(about)
        logger.debug("dtrack server version detected: %s", self._server_version)
        return self._server_version

    def is_server_version_at_least(self, threshold: Union[str, Version]) -> bool:
        """
        Compare the server version against ``threshold``.

        Detects the version once if it is not known yet and detection is
        enabled. An unknown version compares as older than any threshold.
        """
        if self._server_version is None and self._detect_server_version:
            self.detect_server_version()
        return is_at_least(self._server_version, threshold)

    # ── Resource Properties (cached) ───────────────────────────

    @cached_property
    def about(self) -> "AboutResource":
        from .resources.about import AboutResource
        return AboutResource(self)

    @cached_property
    def events(self) -> "EventsResource":
        from .resources.events import EventsResource
        return EventsResource(self)

    @cached_property
    def projects(self) -> "ProjectsResource":
        from .resources.projects import ProjectsResource
        return ProjectsResource(self)


class AsyncDTrackClient:
    """
    Dependency-Track REST API async client.

    Supports async context manager for clean resource management:

        async with AsyncDTrackClient(api_key="odt_...") as client:
            page = await client.projects.get_all()
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        bearer_token: Optional[str] = None,
        server_version: Optional[str] = None,
        detect_server_version: bool = True,
        timeout: float = 30.0,
        max_retries: int = 2,
        **kwargs,
    ):
        """
        Args:
            base_url: API server URL (default: http://localhost:8081 or DTRACK_URL)
            api_key: Team API key. Defaults to DTRACK_API_KEY env var.
            bearer_token: JWT for user sessions, used when no API key is given.
            server_version: Pin the server version instead of asking the server.
            detect_server_version: Query /api/version the first time a version-gated call needs it.
            timeout: Request timeout in seconds (default: 30)
            max_retries: Number of connection retries (default: 2)
            **kwargs: Arguments for httpx.AsyncClient
        """
        headers = _auth_headers(api_key, bearer_token)
        base_url = base_url or os.environ.get("DTRACK_URL", DEFAULT_BASE_URL)

        self.base_url = base_url.rstrip("/")
        self._detect_server_version = detect_server_version
        self._server_version: Optional[Version] = (
            parse_version(server_version) if server_version else None
        )

        headers["Accept"] = "application/json"
        from . import __version__
        headers["User-Agent"] = f"dtrack-python/{__version__}"

        # Only set retry transport if user hasn't provided their own transport
        if "transport" not in kwargs and max_retries > 0:
            kwargs["transport"] = httpx.AsyncHTTPTransport(retries=max_retries)

        async def _alog_req(request: httpx.Request):
            request.extensions["dtrack_started"] = time.perf_counter()
            log_request(request.method, str(request.url))

        async def _alog_res(response: httpx.Response):
            start = response.request.extensions.get("dtrack_started", time.perf_counter())
            elapsed = (time.perf_counter() - start) * 1000
            log_response(response.status_code, str(response.url), elapsed)

        self._http = httpx.AsyncClient(
            base_url=self.base_url,
            headers=headers,
            timeout=timeout,
            event_hooks={"request": [_alog_req], "response": [_alog_res]},
            **kwargs,
        )

    def __repr__(self) -> str:
        return f"AsyncDTrackClient(base_url={self.base_url!r})"

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def close(self):
        """Close the underlying HTTP connection pool."""
        await self._http.aclose()

    # ── Server Version ─────────────────────────────────────────

    @property
    def server_version(self) -> Optional[Version]:
        return self._server_version

    async def detect_server_version(self) -> Version:
        """Ask the server for its version and remember it."""
        about = await self.about.get()
        self._server_version = _reported_version(about)
        logger.debug("dtrack server version detected: %s", self._server_version)
        return self._server_version

    async def is_server_version_at_least(self, threshold: Union[str, Version]) -> bool:
        if self._server_version is None and self._detect_server_version:
            await self.detect_server_version()
        return is_at_least(self._server_version, threshold)

    # ── Resource Properties (cached) ───────────────────────────

    @cached_property
    def about(self) -> "AsyncAboutResource":
        from .resources.about import AsyncAboutResource
        return AsyncAboutResource(self)

    @cached_property
    def events(self) -> "AsyncEventsResource":
        from .resources.events import AsyncEventsResource
        return AsyncEventsResource(self)

    @cached_property
    def projects(self) -> "AsyncProjectsResource":
        from .resources.projects import AsyncProjectsResource
        return AsyncProjectsResource(self)
