"""Resource for server version information."""

from ..types import About
from ..exceptions import raise_for_status, decode_model


class AboutResource:
    """Reports the application name and version of the API server."""

    def __init__(self, client):
        self._client = client

    def get(self) -> About:
        """Fetch ``/api/version``. No API key permission is required."""
        resp = self._client._http.get("/api/version")
        raise_for_status(resp)
        return decode_model(About, resp)


class AsyncAboutResource:
    def __init__(self, client):
        self._client = client

    async def get(self) -> About:
        resp = await self._client._http.get("/api/version")
        raise_for_status(resp)
        return decode_model(About, resp)
