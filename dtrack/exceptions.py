"""
Custom exceptions for the dtrack client.

Provides clear, actionable error messages instead of raw httpx.HTTPStatusError.
Dependency-Track answers errors either as plain text or, on newer servers, as
an RFC 7807 problem document:

    {"status": 404, "title": "Not Found", "detail": "The project could not be found."}
"""

import json

import httpx
import pydantic


class DTrackError(Exception):
    """Base exception for all dtrack client errors."""

    def __init__(
        self,
        message: str,
        status_code: int = None,
        response: httpx.Response = None,
    ):
        self.message = message
        self.status_code = status_code
        self.response = response
        super().__init__(message)

    def __repr__(self) -> str:
        parts = [f"message={self.message!r}"]
        if self.status_code:
            parts.append(f"status_code={self.status_code}")
        return f"{self.__class__.__name__}({', '.join(parts)})"


class BadRequestError(DTrackError):
    """The server rejected the request payload or parameters."""
    pass


class AuthenticationError(DTrackError):
    """Invalid or missing API key / bearer token."""
    pass


class PermissionError(DTrackError):
    """Valid credentials but the team lacks the required permission."""
    pass


class NotFoundError(DTrackError):
    """Requested resource does not exist."""
    pass


class ConflictError(DTrackError):
    """The resource already exists (e.g. a project with the same name and version)."""
    pass


class ServerError(DTrackError):
    """Dependency-Track returned a 5xx error."""
    pass


class DecodeError(DTrackError):
    """The response body could not be decoded into the expected type."""
    pass


def _parse_error_body(response: httpx.Response) -> str:
    """Return the most useful human-readable message from an error response."""
    try:
        body = response.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return response.text or response.reason_phrase
    if isinstance(body, dict):
        detail = body.get("detail") or body.get("title") or body.get("message")
        if detail:
            return str(detail)
    return response.text or response.reason_phrase


def raise_for_status(response: httpx.Response) -> None:
    """
    Check response status and raise the appropriate dtrack exception.

    Use this instead of response.raise_for_status() for better error messages.
    """
    if response.is_success:
        return

    status = response.status_code
    message = _parse_error_body(response)
    kwargs = {"status_code": status, "response": response}

    if status == 400:
        raise BadRequestError(f"Bad request: {message}", **kwargs)
    elif status == 401:
        raise AuthenticationError(f"Authentication failed: {message}", **kwargs)
    elif status == 403:
        raise PermissionError(f"Permission denied: {message}", **kwargs)
    elif status == 404:
        raise NotFoundError(f"Resource not found: {message}", **kwargs)
    elif status == 409:
        raise ConflictError(f"Conflict: {message}", **kwargs)
    elif 400 <= status < 500:
        raise DTrackError(f"Client error ({status}): {message}", **kwargs)
    elif status >= 500:
        raise ServerError(f"Server error ({status}): {message}", **kwargs)


def decode_json(response: httpx.Response):
    """Parse the JSON body of a successful response, raising DecodeError on garbage."""
    try:
        return response.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise DecodeError(
            f"Invalid JSON in response ({response.status_code}): {e}",
            status_code=response.status_code,
            response=response,
        ) from e


def decode_model(model, response: httpx.Response):
    """Decode a JSON object response into ``model``."""
    data = decode_json(response)
    try:
        return model.model_validate(data)
    except pydantic.ValidationError as e:
        raise DecodeError(
            f"Unexpected {model.__name__} payload: {e}",
            status_code=response.status_code,
            response=response,
        ) from e


def decode_model_list(model, response: httpx.Response) -> list:
    """Decode a JSON array response into a list of ``model``."""
    data = decode_json(response)
    if not isinstance(data, list):
        raise DecodeError(
            f"Expected a JSON array of {model.__name__}, got {type(data).__name__}",
            status_code=response.status_code,
            response=response,
        )
    try:
        return [model.model_validate(item) for item in data]
    except pydantic.ValidationError as e:
        raise DecodeError(
            f"Unexpected {model.__name__} payload: {e}",
            status_code=response.status_code,
            response=response,
        ) from e
