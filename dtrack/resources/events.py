"""Resource for polling asynchronous server-side events."""

from ..client import expand_path
from ..exceptions import raise_for_status, decode_json, DecodeError


def _processing_flag(resp) -> bool:
    data = decode_json(resp)
    if not isinstance(data, dict) or not isinstance(data.get("processing"), bool):
        raise DecodeError(
            f"Expected {{\"processing\": bool}}, got {data!r}",
            status_code=resp.status_code,
            response=resp,
        )
    return data["processing"]


class EventsResource:
    """Tracks work queued by operations that answer with an event token."""

    def __init__(self, client):
        self._client = client

    def is_being_processed(self, token: str) -> bool:
        """
        Check whether tasks tied to ``token`` are still queued or running.

        ``False`` means nothing is pending for the token. It does not say
        whether the work succeeded.
        """
        resp = self._client._http.get(expand_path("/api/v1/event/token/{token}", token=token))
        raise_for_status(resp)
        return _processing_flag(resp)


class AsyncEventsResource:
    """Async variant of :class:`EventsResource`."""

    def __init__(self, client):
        self._client = client

    async def is_being_processed(self, token: str) -> bool:
        resp = await self._client._http.get(expand_path("/api/v1/event/token/{token}", token=token))
        raise_for_status(resp)
        return _processing_flag(resp)
