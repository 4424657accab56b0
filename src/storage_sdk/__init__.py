"""Storage Service SDK - Python client.

An asyncio client for the storage service REST API: upload, validation,
metadata, listing and search, update, delete, and content download.
"""

__version__ = "1.0.0"

from ._classifier import parse_error_response
from ._client import StorageClient
from ._config import API_PATH_PREFIX, DEFAULT_TIMEOUT, ClientConfig
from ._content import FileContent, filename_from_disposition
from ._detection import detect_content_type
from ._errors import (
    StorageAPIError,
    StorageArgumentError,
    StorageConfigError,
    StorageDecodeError,
    StorageEncodeError,
    StorageError,
    StorageFileNotFoundError,
    StorageLocalIOError,
    StorageNetworkError,
    is_api_error,
)
from ._models import (
    FileItem,
    FileLimits,
    FileLimitsResponse,
    UNSET,
    FileStatus,
    GetFileResponse,
    ListFilesResponse,
    Pagination,
    UpdateFileRequest,
    UploadFileResponse,
    UploadResult,
    ValidateFileResponse,
    ValidationReport,
    ValidationResultItem,
)

__all__ = [
    "API_PATH_PREFIX",
    "DEFAULT_TIMEOUT",
    "ClientConfig",
    "FileContent",
    "FileItem",
    "FileLimits",
    "FileLimitsResponse",
    "FileStatus",
    "GetFileResponse",
    "ListFilesResponse",
    "Pagination",
    "StorageAPIError",
    "StorageArgumentError",
    "StorageClient",
    "StorageConfigError",
    "StorageDecodeError",
    "StorageEncodeError",
    "StorageError",
    "StorageFileNotFoundError",
    "StorageLocalIOError",
    "StorageNetworkError",
    "UNSET",
    "UpdateFileRequest",
    "UploadFileResponse",
    "UploadResult",
    "ValidateFileResponse",
    "ValidationReport",
    "ValidationResultItem",
    "detect_content_type",
    "filename_from_disposition",
    "is_api_error",
    "parse_error_response",
]
