"""HTTP transport: one round trip per call over a shared ``httpx.AsyncClient``."""

from __future__ import annotations

import json
import logging
from contextlib import ExitStack
from typing import IO, Any, Mapping, Sequence

import aiofiles
import httpx

from ._config import ClientConfig
from ._detection import SNIFF_SIZE, detect_content_type
from ._errors import StorageEncodeError, StorageFileNotFoundError, StorageLocalIOError, StorageNetworkError

logger = logging.getLogger("storage_sdk")


class Transport:
    """Sends requests relative to ``{base_url}/api/v1``.

    Three body modes are supported: JSON (``request_json``), multipart form
    streamed from local files (``request_multipart``) and streamed responses
    handed to the caller unread (``open_stream``). Status codes are not
    checked here.
    """

    def __init__(self, config: ClientConfig, transport: httpx.AsyncBaseTransport | None = None) -> None:
        self._config = config
        self._client = httpx.AsyncClient(timeout=httpx.Timeout(config.timeout), transport=transport)

    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def is_closed(self) -> bool:
        return self._client.is_closed

    def url_for(self, path: str) -> str:
        return self._config.api_url + path

    async def aclose(self) -> None:
        await self._client.aclose()

    # ------------------------------------------------------------------
    # JSON
    # ------------------------------------------------------------------
    async def request_json(self, method: str, path: str, body: Any = None, *, action: str) -> httpx.Response:
        """Send ``body`` (if any) as JSON and return the fully read response."""
        headers: dict[str, str] = {}
        content: bytes | None = None
        if body is not None:
            try:
                content = json.dumps(body).encode("utf-8")
            except (TypeError, ValueError) as e:
                raise StorageEncodeError(f"{action}: marshal body: {e}") from e
            headers["Content-Type"] = "application/json"

        return await self._send(method, path, action=action, content=content, headers=headers)

    # ------------------------------------------------------------------
    # Multipart
    # ------------------------------------------------------------------
    async def request_multipart(
        self,
        path: str,
        files: Mapping[str, Sequence[str]],
        fields: Mapping[str, str] | None = None,
        *,
        action: str,
    ) -> httpx.Response:
        """POST a multipart form built from local file paths and scalar fields.

        Every file is opened before the request is sent, so a missing file
        fails without touching the network. The head of each file is sniffed
        with aiofiles. The body goes out through httpx's multipart stream,
        which only accepts sync handles and reads them in chunks on the event
        loop. Handles are closed on every exit path.

        Raises:
            StorageFileNotFoundError: A path does not exist.
            StorageLocalIOError: A path exists but cannot be opened.
        """
        with ExitStack() as stack:
            parts: list[tuple[str, tuple[str, IO[bytes], str]]] = []
            for field_name, paths in files.items():
                for file_path in paths:
                    head = await _read_head(file_path, action)
                    handle = stack.enter_context(_open_local(file_path, action))
                    filename = _base_name(file_path)
                    content_type = detect_content_type(head, filename)
                    logger.debug("Multipart part %s: %s (%s)", field_name, filename, content_type)
                    parts.append((field_name, (filename, handle, content_type)))

            return await self._send("POST", path, action=action, files=parts, data=dict(fields or {}))

    # ------------------------------------------------------------------
    # Streaming
    # ------------------------------------------------------------------
    async def open_stream(
        self,
        path: str,
        *,
        headers: Mapping[str, str] | None = None,
        action: str,
    ) -> httpx.Response:
        """GET ``path`` without reading the body. The caller must ``aclose()`` the response."""
        return await self._send("GET", path, action=action, headers=dict(headers or {}), stream=True)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    async def _send(self, method: str, path: str, *, action: str, stream: bool = False, **kwargs: Any) -> httpx.Response:
        url = self.url_for(path)
        logger.debug("%s %s", method, url)
        try:
            request = self._client.build_request(method, url, **kwargs)
            response = await self._client.send(request, stream=stream)
        except httpx.RequestError as e:
            raise StorageNetworkError(f"{action}: {e}") from e
        logger.debug("%s %s -> %s", method, url, response.status_code)
        return response


async def _read_head(file_path: str, action: str) -> bytes:
    try:
        async with aiofiles.open(file_path, "rb") as f:
            return await f.read(SNIFF_SIZE)
    except FileNotFoundError as e:
        raise StorageFileNotFoundError(f"{action}: open file {file_path}: {e.strerror}", file_path) from e
    except OSError as e:
        raise StorageLocalIOError(f"{action}: open file {file_path}: {e.strerror}", file_path) from e


def _open_local(file_path: str, action: str) -> IO[bytes]:
    try:
        return open(file_path, "rb")
    except FileNotFoundError as e:
        raise StorageFileNotFoundError(f"{action}: open file {file_path}: {e.strerror}", file_path) from e
    except OSError as e:
        raise StorageLocalIOError(f"{action}: open file {file_path}: {e.strerror}", file_path) from e


def _base_name(file_path: str) -> str:
    """Last component of a POSIX or Windows path."""
    return file_path.replace("\\", "/").rsplit("/", 1)[-1]
