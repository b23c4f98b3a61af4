"""Resource for managing projects."""

from typing import Any, AsyncIterator, Dict, Iterator, List, Optional, Union
from uuid import UUID

import httpx

from .._logging import log_version_gate
from ..client import expand_path
from ..exceptions import raise_for_status, decode_model, decode_model_list
from ..types import EventToken, EventTokenResponse, Page, PageOptions, Project, ProjectCloneRequest
from ..versioning import CLONE_RETURNS_EVENT_TOKEN

TOTAL_COUNT_HEADER = "X-Total-Count"


def _bool(value: bool) -> str:
    return "true" if value else "false"


def _page_params(page_options: Optional[PageOptions]) -> Dict[str, Any]:
    return page_options.to_params() if page_options else {}


def _project_page(resp: httpx.Response) -> Page[Project]:
    """Combine the JSON item array with the out-of-band total count."""
    items = decode_model_list(Project, resp)
    try:
        total = int(resp.headers[TOTAL_COUNT_HEADER])
    except (KeyError, ValueError):
        total = len(items)
    return Page(items=items, total_count=total)


def _require_uuid(project: Project) -> UUID:
    if project.uuid is None:
        raise ValueError("project.uuid is required to update a project")
    return project.uuid


def _require(**values: str) -> None:
    for key, value in values.items():
        if not value:
            raise ValueError(f"{key} is required")


class ProjectsResource:
    """API resource for projects."""

    def __init__(self, client):
        self._client = client

    def get(self, project_uuid: Union[UUID, str]) -> Project:
        """Fetch a single project. Raises NotFoundError for unknown UUIDs."""
        resp = self._client._http.get(expand_path("/api/v1/project/{uuid}", uuid=project_uuid))
        raise_for_status(resp)
        return decode_model(Project, resp)

    def get_all(self, page_options: Optional[PageOptions] = None) -> Page[Project]:
        """
        List one page of projects.

        Args:
            page_options: Offset/limit of the slice to fetch. The server
                default page size applies when omitted.

        Returns:
            A Page whose ``total_count`` covers all projects, not just this page.
        """
        resp = self._client._http.get("/api/v1/project", params=_page_params(page_options))
        raise_for_status(resp)
        return _project_page(resp)

    def iter_all(self, page_size: int = 100) -> Iterator[Project]:
        """Auto-paginating iterator over all projects."""
        offset = 0
        while True:
            page = self.get_all(PageOptions(offset=offset, limit=page_size))
            if not page.items:
                break
            yield from page.items
            offset += len(page.items)
            if len(page.items) < page_size:
                break

    def get_projects_for_name(
        self,
        name: str,
        exclude_inactive: bool = False,
        only_root: bool = False,
    ) -> List[Project]:
        """
        List all versions of the project called ``name``.

        An empty list means no project matched; it is not an error.
        """
        _require(name=name)
        params = {
            "name": name,
            "excludeInactive": _bool(exclude_inactive),
            "onlyRoot": _bool(only_root),
        }
        resp = self._client._http.get("/api/v1/project", params=params)
        raise_for_status(resp)
        return decode_model_list(Project, resp)

    def lookup(self, name: str, version: str) -> Project:
        """Find the project with exactly this name and version. Raises NotFoundError otherwise."""
        _require(name=name, version=version)
        resp = self._client._http.get("/api/v1/project/lookup", params={"name": name, "version": version})
        raise_for_status(resp)
        return decode_model(Project, resp)

    def get_all_by_tag(
        self,
        tag: str,
        exclude_inactive: bool = False,
        only_root: bool = False,
        page_options: Optional[PageOptions] = None,
    ) -> Page[Project]:
        """
        List one page of projects carrying ``tag``.

        The tag is part of the path (``/api/v1/project/tag/{tag}``) and is
        percent-encoded as a single segment.
        """
        _require(tag=tag)
        params = {
            "excludeInactive": _bool(exclude_inactive),
            "onlyRoot": _bool(only_root),
            **_page_params(page_options),
        }
        resp = self._client._http.get(expand_path("/api/v1/project/tag/{tag}", tag=tag), params=params)
        raise_for_status(resp)
        return _project_page(resp)

    def create(self, project: Project) -> Project:
        """
        Create a project. The server assigns the UUID.

        Dependency-Track maps creation to PUT; a duplicate name/version pair
        is rejected with ConflictError.
        """
        resp = self._client._http.put("/api/v1/project", json=project.to_payload())
        raise_for_status(resp)
        return decode_model(Project, resp)

    def update(self, project: Project) -> Project:
        """Replace an existing project. ``project.uuid`` must be set."""
        _require_uuid(project)
        resp = self._client._http.post("/api/v1/project", json=project.to_payload())
        raise_for_status(resp)
        return decode_model(Project, resp)

    def patch(self, project_uuid: Union[UUID, str], project: Project) -> Project:
        """
        Partially update a project.

        Only fields explicitly set on ``project`` are sent, so
        ``Project(description="new")`` changes nothing but the description.
        """
        resp = self._client._http.patch(
            expand_path("/api/v1/project/{uuid}", uuid=project_uuid),
            json=project.to_payload(exclude_unset=True),
        )
        raise_for_status(resp)
        return decode_model(Project, resp)

    def delete(self, project_uuid: Union[UUID, str]) -> None:
        """Delete a project. Raises NotFoundError if it is already gone."""
        resp = self._client._http.delete(expand_path("/api/v1/project/{uuid}", uuid=project_uuid))
        raise_for_status(resp)

    def clone(self, clone_request: ProjectCloneRequest) -> Optional[EventToken]:
        """
        Trigger cloning of a project into a new version.

        Cloning runs asynchronously on the server. Servers 4.11.0 and newer
        answer with an event token that can be polled through
        ``client.events.is_being_processed``; older servers answer with
        nothing usable and ``None`` is returned.
        """
        returns_token = self._client.is_server_version_at_least(CLONE_RETURNS_EVENT_TOKEN)
        log_version_gate("clone", CLONE_RETURNS_EVENT_TOKEN, self._client.server_version, returns_token)
        resp = self._client._http.put("/api/v1/project/clone", json=clone_request.to_payload())
        raise_for_status(resp)
        if not returns_token:
            return None
        return decode_model(EventTokenResponse, resp).token


class AsyncProjectsResource:
    """Async API resource for projects."""

    def __init__(self, client):
        self._client = client

    async def get(self, project_uuid: Union[UUID, str]) -> Project:
        resp = await self._client._http.get(expand_path("/api/v1/project/{uuid}", uuid=project_uuid))
        raise_for_status(resp)
        return decode_model(Project, resp)

    async def get_all(self, page_options: Optional[PageOptions] = None) -> Page[Project]:
        resp = await self._client._http.get("/api/v1/project", params=_page_params(page_options))
        raise_for_status(resp)
        return _project_page(resp)

    async def iter_all(self, page_size: int = 100) -> AsyncIterator[Project]:
        """Auto-paginating async iterator over all projects."""
        offset = 0
        while True:
            page = await self.get_all(PageOptions(offset=offset, limit=page_size))
            if not page.items:
                break
            for project in page.items:
                yield project
            offset += len(page.items)
            if len(page.items) < page_size:
                break

    async def get_projects_for_name(
        self,
        name: str,
        exclude_inactive: bool = False,
        only_root: bool = False,
    ) -> List[Project]:
        _require(name=name)
        params = {
            "name": name,
            "excludeInactive": _bool(exclude_inactive),
            "onlyRoot": _bool(only_root),
        }
        resp = await self._client._http.get("/api/v1/project", params=params)
        raise_for_status(resp)
        return decode_model_list(Project, resp)

    async def lookup(self, name: str, version: str) -> Project:
        _require(name=name, version=version)
        resp = await self._client._http.get("/api/v1/project/lookup", params={"name": name, "version": version})
        raise_for_status(resp)
        return decode_model(Project, resp)

    async def get_all_by_tag(
        self,
        tag: str,
        exclude_inactive: bool = False,
        only_root: bool = False,
        page_options: Optional[PageOptions] = None,
    ) -> Page[Project]:
        _require(tag=tag)
        params = {
            "excludeInactive": _bool(exclude_inactive),
            "onlyRoot": _bool(only_root),
            **_page_params(page_options),
        }
        resp = await self._client._http.get(expand_path("/api/v1/project/tag/{tag}", tag=tag), params=params)
        raise_for_status(resp)
        return _project_page(resp)

    async def create(self, project: Project) -> Project:
        resp = await self._client._http.put("/api/v1/project", json=project.to_payload())
        raise_for_status(resp)
        return decode_model(Project, resp)

    async def update(self, project: Project) -> Project:
        _require_uuid(project)
        resp = await self._client._http.post("/api/v1/project", json=project.to_payload())
        raise_for_status(resp)
        return decode_model(Project, resp)

    async def patch(self, project_uuid: Union[UUID, str], project: Project) -> Project:
        resp = await self._client._http.patch(
            expand_path("/api/v1/project/{uuid}", uuid=project_uuid),
            json=project.to_payload(exclude_unset=True),
        )
        raise_for_status(resp)
        return decode_model(Project, resp)

    async def delete(self, project_uuid: Union[UUID, str]) -> None:
        resp = await self._client._http.delete(expand_path("/api/v1/project/{uuid}", uuid=project_uuid))
        raise_for_status(resp)

    async def clone(self, clone_request: ProjectCloneRequest) -> Optional[EventToken]:
        """Async variant of :meth:`ProjectsResource.clone`."""
        returns_token = await self._client.is_server_version_at_least(CLONE_RETURNS_EVENT_TOKEN)
        log_version_gate("clone", CLONE_RETURNS_EVENT_TOKEN, self._client.server_version, returns_token)
        resp = await self._client._http.put("/api/v1/project/clone", json=clone_request.to_payload())
        raise_for_status(resp)
        if not returns_token:
            return None
        return decode_model(EventTokenResponse, resp).token
