"""
Response parsing and transport failure classification.

Shared by the endpoint resolver (directory GET) and the request
dispatcher (business POST) so both map outcomes onto the same errors.
"""

import json
import socket
from typing import Any

import httpx

from caconnector.core.logging import logger
from caconnector.exceptions import HttpError, MalformedResponseError

# Messages raised by resolvers when a host name cannot be resolved
_NAME_RESOLUTION_MARKERS = (
    "name or service not known",
    "nodename nor servname",
    "getaddrinfo failed",
    "temporary failure in name resolution",
    "no address associated with hostname",
    "name resolution",
)


def parse_json_response(
    response: httpx.Response, url: str, correlation_id: str
) -> dict[str, Any]:
    """
    Turn an HTTP response into a JSON object or a typed error.

    Args:
        response: Completed response (body already read)
        url: Request URL, for error context
        correlation_id: client-request-id sent with the request

    Returns:
        Decoded JSON object of a 2xx response

    Raises:
        HttpError: Status outside [200, 300), whatever the body holds
        MalformedResponseError: Empty, unreadable or non-object JSON body
    """
    body: Any = None
    malformed: str | None = None

    try:
        raw = response.content
    except httpx.ResponseNotRead:
        raw = b""
        malformed = "Unable to read response body"

    if malformed is None and not raw:
        malformed = "Response body was empty"
    elif malformed is None:
        try:
            body = json.loads(raw)
        except ValueError:
            malformed = "Unable to parse response to JSON"

    if not response.is_success:
        error = HttpError(
            status_code=response.status_code,
            reason_phrase=response.reason_phrase,
            body=body,
            url=url,
            correlation_id=correlation_id,
        )
        logger.error(error.message)
        raise error

    if malformed is not None:
        error = MalformedResponseError(f"{malformed} from {url}", correlation_id)
        logger.error(error.message)
        raise error

    if not isinstance(body, dict):
        error = MalformedResponseError(
            f"Expected a JSON object from {url}, got {type(body).__name__}",
            correlation_id,
        )
        logger.error(error.message)
        raise error

    return body


def is_name_resolution_failure(exc: BaseException) -> bool:
    """
    Check whether a transport error was caused by DNS resolution.

    Walks the exception chain looking for ``socket.gaierror`` or a resolver
    message, since httpx wraps the original error.
    """
    seen: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        if isinstance(current, socket.gaierror):
            return True
        message = str(current).lower()
        if any(marker in message for marker in _NAME_RESOLUTION_MARKERS):
            return True
        current = current.__cause__ or current.__context__
    return False
