"""Turn completed HTTP exchanges into decoded payloads or ``StorageAPIError``.

The functions here only look at the status code and body, so JSON and
multipart requests share the same success/failure rules.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Collection

import httpx

from ._errors import StorageAPIError, StorageDecodeError

logger = logging.getLogger("storage_sdk")


def parse_error_response(status_code: int, body: str) -> StorageAPIError:
    """Normalise an error body into a ``StorageAPIError``.

    A JSON object exposing ``error`` and/or ``message`` supplies the message,
    ``error`` taking priority. Anything else uses the raw body as the message.

    Examples:
        >>> parse_error_response(404, '{"error": "not found"}').message
        'not found'
        >>> parse_error_response(500, "boom").message
        'boom'
    """
    message = body
    try:
        decoded = json.loads(body)
    except ValueError:
        decoded = None

    if isinstance(decoded, dict):
        error = decoded.get("error")
        detail = decoded.get("message")
        if isinstance(error, str) and error:
            message = error
        elif isinstance(detail, str) and detail:
            message = detail

    return StorageAPIError(status_code=status_code, message=message, body=body)


def ensure_status(response: httpx.Response, expected: Collection[int]) -> None:
    """Raise ``StorageAPIError`` unless ``response.status_code`` is in ``expected``.

    The response body must already be read.
    """
    if response.status_code in expected:
        return
    logger.debug(
        "Unexpected status %s for %s %s (expected %s)",
        response.status_code,
        response.request.method,
        response.request.url,
        sorted(expected),
    )
    raise parse_error_response(response.status_code, response.text)


async def ensure_stream_status(response: httpx.Response, expected: Collection[int]) -> None:
    """Like ``ensure_status`` for a streamed response.

    On failure the body is read and the response closed before raising, so
    the caller never receives a connection it has to release.
    """
    if response.status_code in expected:
        return
    try:
        await response.aread()
    finally:
        await response.aclose()
    ensure_status(response, expected)


def decode_json(response: httpx.Response, action: str) -> Any:
    """Decode the response body as JSON, raising ``StorageDecodeError`` on failure."""
    try:
        return response.json()
    except ValueError as e:
        raise StorageDecodeError(f"{action}: invalid JSON response body: {e}") from e
