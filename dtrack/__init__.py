"""
dtrack: Python client for the Dependency-Track REST API.

Usage:

    from dtrack import DTrackClient
    client = DTrackClient(base_url="https://dtrack.example.com", api_key="odt_...")

    page = client.projects.get_all()
    project = client.projects.lookup("acme-app", "1.2.0")
"""

from .client import DTrackClient, AsyncDTrackClient
from .types import (
    About,
    EventToken,
    EventTokenResponse,
    ExternalReference,
    Page,
    PageOptions,
    ParentRef,
    Project,
    ProjectCloneRequest,
    ProjectMetrics,
    ProjectProperty,
    Tag,
)
from .exceptions import (
    DTrackError,
    BadRequestError,
    AuthenticationError,
    PermissionError,
    NotFoundError,
    ConflictError,
    ServerError,
    DecodeError,
)

__version__ = "0.1.0"

__all__ = [
    # Clients
    "DTrackClient",
    "AsyncDTrackClient",
    # Types
    "About",
    "EventToken",
    "EventTokenResponse",
    "ExternalReference",
    "Page",
    "PageOptions",
    "ParentRef",
    "Project",
    "ProjectCloneRequest",
    "ProjectMetrics",
    "ProjectProperty",
    "Tag",
    # Exceptions
    "DTrackError",
    "BadRequestError",
    "AuthenticationError",
    "PermissionError",
    "NotFoundError",
    "ConflictError",
    "ServerError",
    "DecodeError",
    # Metadata
    "__version__",
]
