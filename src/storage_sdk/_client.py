"""StorageClient -- async client for the storage service REST API."""

from __future__ import annotations

import json
import logging
from typing import Any, Callable, Collection, Mapping, Sequence, TypeVar, Union
from urllib.parse import quote

import httpx

from ._classifier import decode_json, ensure_status, ensure_stream_status
from ._config import ClientConfig
from ._content import FileContent
from ._errors import StorageArgumentError, StorageDecodeError, StorageEncodeError
from ._models import (
    FileLimitsResponse,
    GetFileResponse,
    ListFilesResponse,
    UpdateFileRequest,
    UploadFileResponse,
    ValidateFileResponse,
)
from ._transport import Transport

logger = logging.getLogger("storage_sdk")

T = TypeVar("T")

# Upload metadata may be given pre-encoded or as a mapping.
MetadataLike = Union[str, Mapping[str, Any]]

FILES_FIELD = "files"
METADATA_FIELD = "metadata"

HTTP_OK = 200
HTTP_CREATED = 201
HTTP_NO_CONTENT = 204
HTTP_PARTIAL_CONTENT = 206
HTTP_NOT_MODIFIED = 304


class StorageClient:
    """Client for the storage service's ``/api/v1/files`` endpoints.

    Every coroutine performs exactly one HTTP request. Responses outside an
    operation's accepted status set raise ``StorageAPIError``; missing
    arguments raise ``StorageArgumentError`` before anything is sent.

    Examples:
        Upload and fetch::

            async with StorageClient("http://localhost:3003") as client:
                uploaded = await client.upload_files(["/tmp/report.pdf"], metadata={"owner": "ops"})
                file_id = uploaded.data.uploaded_files[0].id
                record = await client.get_file(file_id)

        From the environment (``STORAGE_SERVICE_URL``)::

            client = StorageClient.from_env()
    """

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------
    def __init__(
        self,
        base_url: str,
        timeout: float | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        config = ClientConfig(base_url=base_url, timeout=timeout)
        logger.info("StorageClient created: base_url=%s timeout=%s", config.base_url, config.timeout)
        self._config = config
        self._transport = Transport(config, transport=transport)

    @classmethod
    def from_config(cls, config: ClientConfig, *, transport: httpx.AsyncBaseTransport | None = None) -> StorageClient:
        return cls(config.base_url, config.timeout, transport=transport)

    @classmethod
    def from_env(cls, *, transport: httpx.AsyncBaseTransport | None = None) -> StorageClient:
        """Create a client from ``STORAGE_SERVICE_URL`` / ``STORAGE_SERVICE_TIMEOUT``."""
        return cls.from_config(ClientConfig.from_env(), transport=transport)

    @property
    def config(self) -> ClientConfig:
        return self._config

    async def aclose(self) -> None:
        """Release pooled connections."""
        await self._transport.aclose()

    async def __aenter__(self) -> StorageClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    def __repr__(self) -> str:
        return f"StorageClient(base_url={self._config.base_url!r}, timeout={self._config.timeout!r})"

    # ------------------------------------------------------------------
    # Upload / validate
    # ------------------------------------------------------------------
    async def upload_files(self, file_paths: Sequence[str], metadata: MetadataLike | None = None) -> UploadFileResponse:
        """Upload one or more local files.

        Args:
            file_paths: Local paths, each sent as a ``files`` form part.
            metadata: Optional metadata applied to every file, either a JSON
                object string or a mapping to be JSON-encoded.

        Returns:
            The upload envelope. A 206 response is returned normally with
            ``is_partial`` set and ``data.failed_uploads`` populated.

        Raises:
            StorageArgumentError: ``file_paths`` is empty.
            StorageFileNotFoundError: A local path does not exist.
            StorageAPIError: The service answered with any other status.
        """
        action = "failed to upload files"
        _require_paths(file_paths)

        fields: dict[str, str] = {}
        encoded = _encode_metadata(metadata, action)
        if encoded:
            fields[METADATA_FIELD] = encoded

        logger.info("Uploading %d file(s)", len(file_paths))
        response = await self._transport.request_multipart(
            "/files/", {FILES_FIELD: list(file_paths)}, fields, action=action
        )
        result = self._decode(response, (HTTP_CREATED, HTTP_PARTIAL_CONTENT), UploadFileResponse.from_dict, action)
        if result.is_partial:
            logger.warning(
                "Partial upload: %d of %d file(s) failed", result.data.failed, result.data.total_files
            )
        return result

    async def validate_files(self, file_paths: Sequence[str]) -> ValidateFileResponse:
        """Ask the service whether files would be accepted, without storing them.

        Raises:
            StorageArgumentError: ``file_paths`` is empty.
            StorageFileNotFoundError: A local path does not exist.
        """
        action = "failed to validate files"
        _require_paths(file_paths)

        logger.info("Validating %d file(s)", len(file_paths))
        response = await self._transport.request_multipart(
            "/files/validate", {FILES_FIELD: list(file_paths)}, action=action
        )
        return self._decode(response, (HTTP_OK,), ValidateFileResponse.from_dict, action)

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------
    async def list_files(self, query: str = "") -> ListFilesResponse:
        """List or search files.

        Args:
            query: A raw query string appended verbatim, e.g.
                ``"page=2&per_page=20&status_eq=active&file_type_eq=jpg"``.
        """
        action = "failed to list files"
        path = "/files"
        query = query.lstrip("?")
        if query:
            path += "?" + query

        logger.info("Listing files: query=%r", query)
        response = await self._transport.request_json("GET", path, action=action)
        return self._decode(response, (HTTP_OK,), ListFilesResponse.from_dict, action)

    async def get_file(self, file_id: str) -> GetFileResponse:
        """Fetch a file's metadata record."""
        action = "failed to get file"
        path = _file_path(file_id)

        logger.info("Getting file %s", file_id)
        response = await self._transport.request_json("GET", path, action=action)
        return self._decode(response, (HTTP_OK,), GetFileResponse.from_dict, action)

    async def download_file(self, file_id: str) -> FileContent:
        """Open a download (attachment) stream for a file.

        The returned ``FileContent`` holds a live connection; release it with
        ``async with`` or ``aclose()``. ``FileContent.filename`` gives the
        name suggested by the server.
        """
        action = "failed to download file"
        path = _file_path(file_id) + "?download=true"

        logger.info("Downloading file %s", file_id)
        response = await self._transport.open_stream(path, action=action)
        await ensure_stream_status(response, (HTTP_OK,))
        return FileContent(response)

    async def serve_file_content(self, file_id: str, etag: str | None = None) -> FileContent:
        """Open an inline content stream for a file (e.g. for image display).

        Args:
            file_id: The file identifier.
            etag: A previously seen ``ETag``; sent as ``If-None-Match`` so the
                server can answer 304. Check ``FileContent.not_modified``.
        """
        action = "failed to serve file content"
        path = _file_path(file_id) + "/content"
        headers = {"If-None-Match": etag} if etag else None

        logger.info("Serving content of file %s", file_id)
        response = await self._transport.open_stream(path, headers=headers, action=action)
        await ensure_stream_status(response, (HTTP_OK, HTTP_NOT_MODIFIED))
        return FileContent(response)

    async def get_file_limits(self) -> FileLimitsResponse:
        """Fetch size limits (default, per-extension) and the upload-limit policy."""
        action = "failed to get file limits"

        response = await self._transport.request_json("GET", "/files/limits", action=action)
        return self._decode(response, (HTTP_OK,), FileLimitsResponse.from_dict, action)

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------
    async def update_file(self, file_id: str, request: UpdateFileRequest) -> GetFileResponse:
        """Partially update a file's name, status and/or metadata.

        Only fields set on ``request`` are sent; see ``UpdateFileRequest``.
        """
        action = "failed to update file"
        path = _file_path(file_id)

        logger.info("Updating file %s: fields=%s", file_id, sorted(request.to_payload()))
        response = await self._transport.request_json("PUT", path, request.to_payload(), action=action)
        return self._decode(response, (HTTP_OK,), GetFileResponse.from_dict, action)

    async def delete_file(self, file_id: str) -> None:
        """Delete a file and its record."""
        action = "failed to delete file"
        path = _file_path(file_id)

        logger.info("Deleting file %s", file_id)
        response = await self._transport.request_json("DELETE", path, action=action)
        ensure_status(response, (HTTP_OK, HTTP_NO_CONTENT))

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    @staticmethod
    def _decode(
        response: httpx.Response,
        expected: Collection[int],
        parse: Callable[[Any], T],
        action: str,
    ) -> T:
        ensure_status(response, expected)
        raw = decode_json(response, action)
        try:
            return parse(raw)
        except StorageDecodeError as e:
            raise StorageDecodeError(f"{action}: {e}") from e
        except (TypeError, ValueError) as e:
            raise StorageDecodeError(f"{action}: unexpected response shape: {e}") from e


# ------------------------------------------------------------------
# Module-private helpers
# ------------------------------------------------------------------


def _file_path(file_id: str) -> str:
    if not file_id:
        raise StorageArgumentError("file ID is required")
    return "/files/" + quote(file_id, safe="")


def _require_paths(file_paths: Sequence[str]) -> None:
    if isinstance(file_paths, str):
        raise StorageArgumentError("file paths must be a sequence of paths, not a single string")
    if not file_paths:
        raise StorageArgumentError("at least one file path is required")


def _encode_metadata(metadata: MetadataLike | None, action: str) -> str:
    if metadata is None:
        return ""
    if isinstance(metadata, str):
        return metadata
    try:
        return json.dumps(dict(metadata))
    except (TypeError, ValueError) as e:
        raise StorageEncodeError(f"{action}: marshal metadata: {e}") from e
