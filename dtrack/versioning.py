"""Server version parsing and comparison used for version-gated API calls."""

import re
from typing import Optional, Union

from packaging.version import InvalidVersion, Version

# Clone answers with an event token from this release onward.
CLONE_RETURNS_EVENT_TOKEN = "4.11.0"

_RELEASE_PREFIX = re.compile(r"^\s*v?(\d+(?:\.\d+)*)")


def parse_version(raw: Union[str, Version]) -> Version:
    """
    Parse a Dependency-Track version string.

    Release builds are plain ``major.minor.patch``. Development builds carry
    Maven-style suffixes such as ``4.11.0-SNAPSHOT`` which are not PEP 440;
    those are compared by their numeric release part.
    """
    if isinstance(raw, Version):
        return raw
    try:
        return Version(raw)
    except InvalidVersion:
        match = _RELEASE_PREFIX.match(raw or "")
        if not match:
            raise
        return Version(match.group(1))


def is_at_least(current: Optional[Version], threshold: Union[str, Version]) -> bool:
    """True if ``current`` is known and not older than ``threshold``."""
    if current is None:
        return False
    return current >= parse_version(threshold)
