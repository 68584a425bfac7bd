"""
K8s API errors.

The underlying client library (now, ``aiohttp``) can be replaced in the future.
We cannot rely on exposing its exceptions to the users of the repositories.
Hence, we have our own hierarchy of exceptions for K8s API errors.

Low-level errors, such as the network connectivity issues, SSL/HTTPS issues,
timeouts, etc, are escalated from the client library as is, since they are
related not to the domain of K8s API, but rather to the networking and encryption.

The original errors of the client library are chained as the causes of our own
specialised errors -- for better explainability of errors in the stack traces.

All client-side errors (HTTP 4xx) are `BadRequestError`. Some selected reasons
are made into their own sub-classes, so that they could be intercepted and
handled separately (e.g. the absence of an object on reading or deleting).
Unlike the underlying client library's errors, the K8s API errors contain more
information about the reasons -- as provided by K8s API in its response bodies,
not guessed only by HTTP statuses alone.
"""
import collections.abc
import json
from typing import Any, Collection, Optional

import aiohttp
from typing_extensions import Literal, TypedDict


class RawStatusCause(TypedDict):
    field: str
    reason: str
    message: str


class RawStatusDetails(TypedDict):
    name: str
    uid: str
    retryAfterSeconds: int
    kind: str
    group: str
    causes: Collection[RawStatusCause]


# https://kubernetes.io/docs/reference/generated/kubernetes-api/v1.19/#status-v1-meta
class RawStatus(TypedDict):
    apiVersion: str
    kind: Literal["Status"]
    code: int
    status: Literal["Success", "Failure"]
    reason: str
    message: str
    details: RawStatusDetails


class APIError(Exception):

    def __init__(
            self,
            payload: Optional[RawStatus],
            *,
            status: int,
            message: Optional[str] = None,
    ) -> None:
        message = (payload.get('message') if payload else None) or message
        super().__init__(message, payload)
        self._status = status
        self._payload = payload
        self._message = message

    def __str__(self) -> str:
        return f"({self._status}) {self._message}" if self._message else f"({self._status})"

    @property
    def status(self) -> int:
        return self._status

    @property
    def code(self) -> Optional[int]:
        return self._payload.get('code') if self._payload else None

    @property
    def message(self) -> Optional[str]:
        return self._message

    @property
    def reason(self) -> Optional[str]:
        return self._payload.get('reason') if self._payload else None

    @property
    def details(self) -> Optional[RawStatusDetails]:
        return self._payload.get('details') if self._payload else None


class BadRequestError(APIError):
    """ Raised for all client-side errors (HTTP 4xx) with the server's message. """


class APIUnauthorizedError(BadRequestError):
    pass


class APIForbiddenError(BadRequestError):
    pass


class APINotFoundError(BadRequestError):
    pass


class APIConflictError(BadRequestError):
    pass


class APIServerError(APIError):
    """ Raised for all server-side and other unexpected errors (non-2xx, non-4xx). """


class UnknownKindError(AttributeError):
    """ Raised when a client is asked for a repository of an unknown kind. """


class WatchingError(Exception):
    """
    Raised when an unexpected error happens in the watch-stream API,
    or when watching is not supported for a resource kind.
    """


async def check_response(
        response: aiohttp.ClientResponse,
) -> None:
    """
    Check for specialised K8s errors, and raise with extended information.
    """
    if response.status >= 400:

        # Read the response's body before it is closed by raise_for_status().
        text: Optional[str]
        try:
            text = await response.text()
        except (aiohttp.ClientConnectionError, aiohttp.ClientPayloadError, UnicodeDecodeError):
            text = None

        payload: Optional[RawStatus]
        try:
            payload = json.loads(text) if text else None
        except json.JSONDecodeError:
            payload = None

        # Better be safe: who knows which sensitive information can be dumped unless kind==Status.
        if not isinstance(payload, collections.abc.Mapping) or payload.get('kind') != 'Status':
            payload = None

        # If no structured information is available, use the plain text or the HTTP reason.
        message = (text.strip() if text and payload is None else None) or response.reason

        cls = (
            APIUnauthorizedError if response.status == 401 else
            APIForbiddenError if response.status == 403 else
            APINotFoundError if response.status == 404 else
            APIConflictError if response.status == 409 else
            BadRequestError if 400 <= response.status < 500 else
            APIServerError
        )

        # Raise the client-specific error while keeping the original error in scope.
        # This call also closes the response's body, so it cannot be read afterwards.
        try:
            response.raise_for_status()
        except aiohttp.ClientResponseError as e:
            raise cls(payload, status=response.status, message=message) from e


async def parse_response(
        response: aiohttp.ClientResponse,
) -> Any:
    """
    Check the response for errors, and either raise or return the parsed data.

    The bodies that are not JSON objects or arrays (e.g. the plain-text pod logs,
    or a bare ``OK``) are returned as the raw text instead of failing.
    """
    await check_response(response)
    text = await response.text()
    try:
        payload = json.loads(text)
    except json.JSONDecodeError:
        return text
    return payload if isinstance(payload, (collections.abc.Mapping, list)) else text
