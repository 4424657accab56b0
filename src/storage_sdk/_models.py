"""Dataclasses mirroring the storage service's JSON envelopes."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Mapping, Union

from ._errors import StorageDecodeError


class FileStatus(str, Enum):
    """Lifecycle status of a stored file.

    Examples:
        >>> FileStatus("archived") is FileStatus.ARCHIVED
        True
    """

    ACTIVE = "active"
    INACTIVE = "inactive"
    ARCHIVED = "archived"
    DELETED = "deleted"


# Unknown statuses from newer servers are kept as plain strings.
StatusLike = Union[FileStatus, str]


@dataclass
class FileItem:
    """A file record as returned by list, get, update and upload."""

    id: str
    original_name: str = ""
    stored_name: str = ""
    file_path: str = ""
    file_size: int = 0
    mime_type: str = ""
    extension: str = ""
    file_type: str = ""
    hash: str = ""
    status: StatusLike = ""
    metadata: dict[str, Any] = field(default_factory=dict)
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_dict(cls, raw: Any) -> FileItem:
        data = _require_object(raw, "file")
        return cls(
            id=str(data.get("id", "")),
            original_name=data.get("originalName") or "",
            stored_name=data.get("storedName") or "",
            file_path=data.get("filePath") or "",
            file_size=int(data.get("fileSize") or 0),
            mime_type=data.get("mimeType") or "",
            extension=data.get("extension") or "",
            file_type=data.get("fileType") or "",
            hash=data.get("hash") or "",
            status=_parse_status(data.get("status")),
            metadata=dict(data.get("metadata") or {}),
            created_at=_parse_timestamp(data.get("createdAt")),
            updated_at=_parse_timestamp(data.get("updatedAt")),
        )


@dataclass
class Pagination:
    page: int = 0
    per_page: int = 0
    total: int = 0
    total_pages: int = 0
    has_next: bool = False
    has_previous: bool = False
    next_page: int | None = None
    previous_page: int | None = None

    @classmethod
    def from_dict(cls, raw: Any) -> Pagination:
        data = _require_object(raw, "pagination")
        return cls(
            page=int(data.get("page") or 0),
            per_page=int(data.get("perPage") or 0),
            total=int(data.get("total") or 0),
            total_pages=int(data.get("totalPages") or 0),
            has_next=bool(data.get("hasNext", False)),
            has_previous=bool(data.get("hasPrevious", False)),
            next_page=data.get("nextPage"),
            previous_page=data.get("previousPage"),
        )


@dataclass
class UploadResult:
    """Per-call outcome of an upload.

    A 206 response carries both ``uploaded_files`` and ``failed_uploads``;
    ``is_partial`` reports that mixed outcome without turning it into an error.
    """

    uploaded_files: list[FileItem] = field(default_factory=list)
    total_files: int = 0
    successful: int = 0
    failed: int = 0
    failed_uploads: list[dict[str, Any]] = field(default_factory=list)

    @property
    def is_partial(self) -> bool:
        return self.failed > 0

    @classmethod
    def from_dict(cls, raw: Any) -> UploadResult:
        data = _require_object(raw, "upload result")
        return cls(
            uploaded_files=[FileItem.from_dict(item) for item in _require_list(data.get("uploadedFiles"), "uploadedFiles")],
            total_files=int(data.get("totalFiles") or 0),
            successful=int(data.get("successful") or 0),
            failed=int(data.get("failed") or 0),
            failed_uploads=[dict(item) for item in _require_list(data.get("failedUploads"), "failedUploads")],
        )


@dataclass
class ValidationResultItem:
    original_name: str = ""
    extension: str = ""
    size: int = 0
    size_formatted: str = ""
    header_mime_type: str = ""
    detected_mime_type: str = ""
    is_allowed: bool = False
    category: str = ""
    description: str = ""
    max_size: int = 0
    max_size_formatted: str = ""

    @classmethod
    def from_dict(cls, raw: Any) -> ValidationResultItem:
        data = _require_object(raw, "validation result")
        return cls(
            original_name=data.get("originalName") or "",
            extension=data.get("extension") or "",
            size=int(data.get("size") or 0),
            size_formatted=data.get("sizeFormatted") or "",
            header_mime_type=data.get("headerMimeType") or "",
            detected_mime_type=data.get("detectedMimeType") or "",
            is_allowed=bool(data.get("isAllowed", False)),
            category=data.get("category") or "",
            description=data.get("description") or "",
            max_size=int(data.get("maxSize") or 0),
            max_size_formatted=data.get("maxSizeFormatted") or "",
        )


@dataclass
class ValidationReport:
    validation_results: list[ValidationResultItem] = field(default_factory=list)
    total_files: int = 0

    @property
    def rejected(self) -> list[ValidationResultItem]:
        return [item for item in self.validation_results if not item.is_allowed]

    @classmethod
    def from_dict(cls, raw: Any) -> ValidationReport:
        data = _require_object(raw, "validation report")
        return cls(
            validation_results=[
                ValidationResultItem.from_dict(item)
                for item in _require_list(data.get("validationResults"), "validationResults")
            ],
            total_files=int(data.get("totalFiles") or 0),
        )


@dataclass
class FileLimits:
    default_max_size: int = 0
    extensions: dict[str, int] = field(default_factory=dict)
    upload_limits: dict[str, Any] = field(default_factory=dict)

    def max_size_for(self, extension: str) -> int:
        """Return the size limit for ``extension`` (with or without a leading dot)."""
        ext = extension.lower().lstrip(".")
        return self.extensions.get(ext, self.extensions.get(f".{ext}", self.default_max_size))

    @classmethod
    def from_dict(cls, raw: Any) -> FileLimits:
        data = _require_object(raw, "file limits")
        return cls(
            default_max_size=int(data.get("defaultMaxSize") or 0),
            extensions={str(k): int(v) for k, v in (data.get("extensions") or {}).items()},
            upload_limits=dict(data.get("uploadLimits") or {}),
        )


# ------------------------------------------------------------------
# Envelopes
# ------------------------------------------------------------------


@dataclass
class _Envelope:
    success: bool
    message: str
    status: int


def _envelope_fields(data: Mapping[str, Any]) -> dict[str, Any]:
    return {
        "success": bool(data.get("success", False)),
        "message": data.get("message") or "",
        "status": int(data.get("status") or 0),
    }


@dataclass
class UploadFileResponse(_Envelope):
    data: UploadResult = field(default_factory=UploadResult)

    @property
    def is_partial(self) -> bool:
        return self.status == 206 or self.data.is_partial

    @classmethod
    def from_dict(cls, raw: Any) -> UploadFileResponse:
        data = _require_object(raw, "upload response")
        payload = data.get("data")
        return cls(
            **_envelope_fields(data),
            data=UploadResult.from_dict(payload) if payload is not None else UploadResult(),
        )


@dataclass
class ValidateFileResponse(_Envelope):
    data: ValidationReport = field(default_factory=ValidationReport)

    @classmethod
    def from_dict(cls, raw: Any) -> ValidateFileResponse:
        data = _require_object(raw, "validate response")
        payload = data.get("data")
        return cls(
            **_envelope_fields(data),
            data=ValidationReport.from_dict(payload) if payload is not None else ValidationReport(),
        )


@dataclass
class ListFilesResponse(_Envelope):
    data: list[FileItem] = field(default_factory=list)
    pagination: Pagination | None = None

    @classmethod
    def from_dict(cls, raw: Any) -> ListFilesResponse:
        data = _require_object(raw, "list response")
        pagination = data.get("pagination")
        return cls(
            **_envelope_fields(data),
            data=[FileItem.from_dict(item) for item in _require_list(data.get("data"), "data")],
            pagination=Pagination.from_dict(pagination) if pagination is not None else None,
        )


@dataclass
class GetFileResponse(_Envelope):
    data: FileItem | None = None

    @classmethod
    def from_dict(cls, raw: Any) -> GetFileResponse:
        data = _require_object(raw, "file response")
        payload = data.get("data")
        return cls(
            **_envelope_fields(data),
            data=FileItem.from_dict(payload) if payload is not None else None,
        )


@dataclass
class FileLimitsResponse(_Envelope):
    data: FileLimits = field(default_factory=FileLimits)

    @classmethod
    def from_dict(cls, raw: Any) -> FileLimitsResponse:
        data = _require_object(raw, "limits response")
        payload = data.get("data")
        return cls(
            **_envelope_fields(data),
            data=FileLimits.from_dict(payload) if payload is not None else FileLimits(),
        )


# ------------------------------------------------------------------
# Requests
# ------------------------------------------------------------------


class _Unset:
    """Marker for an update field the caller did not set."""

    _instance: _Unset | None = None

    def __new__(cls) -> _Unset:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "UNSET"


UNSET = _Unset()


@dataclass
class UpdateFileRequest:
    """Partial update for ``PUT /files/{id}``.

    A field left as ``UNSET`` is not sent and stays unchanged on the server.
    Any other value is sent as-is: ``metadata=None`` goes out as JSON
    ``null``, ``metadata={}`` as an empty object, and ``file_name=""`` is
    forwarded for the server to reject.

    Examples:
        >>> UpdateFileRequest(status=FileStatus.ARCHIVED).to_payload()
        {'status': 'archived'}
    """

    file_name: str | None | _Unset = UNSET
    status: StatusLike | None | _Unset = UNSET
    metadata: Mapping[str, Any] | None | _Unset = UNSET

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {}
        if not isinstance(self.file_name, _Unset):
            payload["fileName"] = self.file_name
        if not isinstance(self.status, _Unset):
            payload["status"] = self.status.value if isinstance(self.status, FileStatus) else self.status
        if not isinstance(self.metadata, _Unset):
            payload["metadata"] = dict(self.metadata) if self.metadata is not None else None
        return payload


# ------------------------------------------------------------------
# Module-private helpers
# ------------------------------------------------------------------


def _require_object(raw: Any, what: str) -> Mapping[str, Any]:
    if not isinstance(raw, Mapping):
        raise StorageDecodeError(f"expected {what} to be a JSON object, got {type(raw).__name__}")
    return raw


def _require_list(raw: Any, what: str) -> list[Any]:
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise StorageDecodeError(f"expected {what} to be a JSON array, got {type(raw).__name__}")
    return raw


def _parse_status(raw: Any) -> StatusLike:
    if not raw:
        return ""
    try:
        return FileStatus(raw)
    except ValueError:
        return str(raw)


_FRACTION = re.compile(r"\.(\d+)")


def _parse_timestamp(raw: Any) -> datetime | None:
    """Parse an RFC 3339 timestamp, accepting ``Z`` and any fraction length.

    The service emits nanosecond precision; the fraction is padded or cut to
    the six digits ``datetime.fromisoformat`` accepts on every supported Python.
    """
    if not raw:
        return None
    text = str(raw)
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    text = _FRACTION.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), text, count=1)
    try:
        return datetime.fromisoformat(text)
    except ValueError as e:
        raise StorageDecodeError(f"invalid timestamp: {raw!r}") from e
