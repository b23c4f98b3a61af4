from .about import AboutResource, AsyncAboutResource
from .events import EventsResource, AsyncEventsResource
from .projects import ProjectsResource, AsyncProjectsResource

__all__ = [
    "AboutResource",
    "AsyncAboutResource",
    "EventsResource",
    "AsyncEventsResource",
    "ProjectsResource",
    "AsyncProjectsResource",
]
