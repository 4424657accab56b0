"""Streamed file content returned by download and inline-serve operations."""

from __future__ import annotations

import logging
import re
from datetime import datetime
from email.utils import parsedate_to_datetime
from typing import AsyncIterator
from urllib.parse import unquote

import aiofiles
import httpx

logger = logging.getLogger("storage_sdk")

NOT_MODIFIED = 304


class FileContent:
    """An open, unread HTTP response carrying a file's bytes.

    The underlying connection stays checked out until ``aclose()`` is called,
    so use it as an async context manager.

    Examples:
        Download to disk::

            async with await client.download_file(file_id) as content:
                await content.save(f"/tmp/{content.filename}")

        Revalidate a cached copy::

            async with await client.serve_file_content(file_id, etag=cached_etag) as content:
                if content.not_modified:
                    return cached_bytes
                return await content.read()
    """

    def __init__(self, response: httpx.Response) -> None:
        self._response = response

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------
    @property
    def response(self) -> httpx.Response:
        return self._response

    @property
    def status_code(self) -> int:
        return self._response.status_code

    @property
    def headers(self) -> httpx.Headers:
        return self._response.headers

    @property
    def not_modified(self) -> bool:
        """True when the server answered 304 to a conditional request; the body is empty."""
        return self._response.status_code == NOT_MODIFIED

    @property
    def content_type(self) -> str | None:
        return self._response.headers.get("content-type")

    @property
    def content_length(self) -> int | None:
        raw = self._response.headers.get("content-length")
        if raw is None:
            return None
        try:
            return int(raw)
        except ValueError:
            return None

    @property
    def etag(self) -> str | None:
        return self._response.headers.get("etag")

    @property
    def filename(self) -> str | None:
        """Filename suggested by ``Content-Disposition``, if any."""
        return filename_from_disposition(self._response.headers.get("content-disposition", ""))

    @property
    def last_modified(self) -> datetime | None:
        raw = self._response.headers.get("last-modified")
        if not raw:
            return None
        try:
            return parsedate_to_datetime(raw)
        except (TypeError, ValueError):
            return None

    @property
    def is_closed(self) -> bool:
        return self._response.is_closed

    # ------------------------------------------------------------------
    # Reading
    # ------------------------------------------------------------------
    async def aiter_bytes(self, chunk_size: int | None = None) -> AsyncIterator[bytes]:
        async for chunk in self._response.aiter_bytes(chunk_size):
            yield chunk

    async def read(self) -> bytes:
        """Read the remaining body into memory. Returns ``b""`` for a 304."""
        if self.not_modified:
            return b""
        return await self._response.aread()

    async def save(self, destination_path: str, chunk_size: int = 65536) -> int:
        """Stream the body to ``destination_path`` and return the bytes written.

        Nothing is written for a 304 response.
        """
        if self.not_modified:
            return 0
        written = 0
        async with aiofiles.open(destination_path, "wb") as f:
            async for chunk in self._response.aiter_bytes(chunk_size):
                await f.write(chunk)
                written += len(chunk)
        logger.debug("Saved %s bytes to %s", written, destination_path)
        return written

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    async def aclose(self) -> None:
        await self._response.aclose()

    async def __aenter__(self) -> FileContent:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    def __repr__(self) -> str:
        return f"FileContent(status_code={self.status_code!r}, filename={self.filename!r}, content_type={self.content_type!r})"


def filename_from_disposition(header_value: str) -> str | None:
    """Extract the filename from a ``Content-Disposition`` header.

    ``filename*=`` (RFC 5987) wins over a plain ``filename=``.

    Examples:
        >>> filename_from_disposition('attachment; filename="report.pdf"')
        'report.pdf'
        >>> filename_from_disposition("inline; filename*=UTF-8''my%20file.txt")
        'my file.txt'
    """
    if not header_value:
        return None

    extended = re.search(r"filename\*\s*=\s*(?:[\w-]+)?'[^']*'([^;]+)", header_value, re.IGNORECASE)
    if extended:
        return unquote(extended.group(1).strip()) or None

    plain = re.search(r'filename\s*=\s*"?([^";]+)"?', header_value, re.IGNORECASE)
    if plain:
        return plain.group(1).strip() or None
    return None
