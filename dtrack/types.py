"""Pydantic models for Dependency-Track API requests and responses."""

from dataclasses import dataclass, field as dataclass_field
from typing import Any, Dict, Generic, Iterator, List, NewType, Optional, TypeVar
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, model_serializer
from pydantic.alias_generators import to_camel

T = TypeVar("T")

EventToken = NewType("EventToken", str)
"""Opaque identifier for polling an asynchronous server-side operation."""


@dataclass
class PageOptions:
    """Offset/limit pagination for list endpoints.

    Usage::

        from dtrack.types import PageOptions

        page = client.projects.get_all(PageOptions(offset=100, limit=50))
    """

    offset: Optional[int] = None
    limit: Optional[int] = None

    def to_params(self) -> Dict[str, Any]:
        """Serialize to query parameters, skipping unset values."""
        params: Dict[str, Any] = {}
        if self.offset is not None:
            params["offset"] = self.offset
        if self.limit is not None:
            params["limit"] = self.limit
        return params


@dataclass
class Page(Generic[T]):
    """One slice of a paginated listing.

    ``total_count`` comes from the ``X-Total-Count`` response header and
    describes the whole result set, not this slice.
    """

    items: List[T] = dataclass_field(default_factory=list)
    total_count: int = 0

    def __iter__(self) -> Iterator[T]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)

    def __repr__(self) -> str:
        return f"Page(items={len(self.items)}, total_count={self.total_count})"


class DTrackModel(BaseModel):
    """Base model mapping snake_case attributes to the API's camelCase keys."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    def to_payload(self, **kwargs) -> Dict[str, Any]:
        """Serialize to the JSON body the API expects. ``None`` fields are left out."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True, **kwargs)


class ParentRef(DTrackModel):
    """Reference to a parent project. Only the UUID is sent; the server resolves it."""
    uuid: UUID


class Tag(DTrackModel):
    name: str


class ProjectProperty(DTrackModel):
    """A key/value property attached to a project."""
    group_name: Optional[str] = None
    property_name: Optional[str] = None
    property_value: Optional[str] = None
    property_type: Optional[str] = None
    description: Optional[str] = None


class ExternalReference(DTrackModel):
    """Link to an external resource (VCS, website, issue tracker, ...)."""
    type: Optional[str] = None
    url: Optional[str] = None
    comment: Optional[str] = None


class ProjectMetrics(DTrackModel):
    """Latest metrics snapshot of a project, as computed by the server."""
    critical: int = 0
    high: int = 0
    medium: int = 0
    low: int = 0
    unassigned: int = 0
    vulnerabilities: int = 0
    vulnerable_components: int = 0
    components: int = 0
    suppressed: int = 0
    findings_total: int = 0
    findings_audited: int = 0
    findings_unaudited: int = 0
    inherited_risk_score: float = 0.0
    policy_violations_fail: int = 0
    policy_violations_warn: int = 0
    policy_violations_info: int = 0
    policy_violations_total: int = 0
    policy_violations_audited: int = 0
    policy_violations_unaudited: int = 0
    first_occurrence: int = 0
    last_occurrence: int = 0


class Project(DTrackModel):
    """A Dependency-Track project (one version of a piece of software)."""
    uuid: Optional[UUID] = None
    author: Optional[str] = None
    publisher: Optional[str] = None
    group: Optional[str] = None
    name: Optional[str] = None
    description: Optional[str] = None
    version: Optional[str] = None
    classifier: Optional[str] = None
    cpe: Optional[str] = None
    purl: Optional[str] = None
    swid_tag_id: Optional[str] = None
    direct_dependencies: Optional[str] = None
    properties: Optional[List[ProjectProperty]] = None
    tags: Optional[List[Tag]] = None
    active: bool = True
    is_latest: Optional[bool] = None  # since 4.12.0
    metrics: Optional[ProjectMetrics] = None
    parent: Optional[ParentRef] = None
    last_bom_import: int = 0  # epoch millis
    external_references: Optional[List[ExternalReference]] = None

    @model_serializer(mode="wrap")
    def _omit_unset_bom_import(self, handler):
        data = handler(self)
        # The server reads 0 as 1970-01-01 rather than "never imported".
        if self.last_bom_import == 0:
            data.pop("lastBomImport", None)
            data.pop("last_bom_import", None)
        return data

    def __repr__(self) -> str:
        return f"Project(uuid={self.uuid!r}, name={self.name!r}, version={self.version!r})"


class ProjectCloneRequest(DTrackModel):
    """Which parts of a project to copy into a new version.

    ``include_policy_violations`` and ``make_clone_latest`` are left out of the
    request when ``None`` so that servers predating them keep their default.
    """
    project_uuid: UUID = Field(alias="project")
    version: str
    include_acl: bool = Field(default=False, alias="includeACL")
    include_audit_history: bool = False
    include_components: bool = False
    include_policy_violations: Optional[bool] = None  # since 4.11.0
    include_properties: bool = False
    include_services: bool = False
    include_tags: bool = False
    make_clone_latest: Optional[bool] = None  # since 4.12.0


class EventTokenResponse(DTrackModel):
    token: EventToken


class About(DTrackModel):
    """Version information reported by ``/api/version``."""
    version: str
    timestamp: Optional[str] = None
    uuid: Optional[str] = None
    application: Optional[str] = None
    framework: Optional[Dict[str, Any]] = None

    def __repr__(self) -> str:
        return f"About(application={self.application!r}, version={self.version!r})"
