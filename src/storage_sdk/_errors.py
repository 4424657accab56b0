"""Exception hierarchy raised by the storage client.

Local errors (``StorageConfigError``, ``StorageArgumentError``,
``StorageLocalIOError``) are raised before any request is sent. Remote
failures are always ``StorageAPIError`` so callers can branch on
``status_code`` instead of parsing messages.
"""

from __future__ import annotations


class StorageError(Exception):
    """Base class for every error raised by this library."""


class StorageConfigError(StorageError, ValueError):
    """The client was configured with missing or invalid settings."""


class StorageArgumentError(StorageError, ValueError):
    """A required argument (file ID, file paths) was missing."""


class StorageLocalIOError(StorageError, OSError):
    """A local file referenced by an upload could not be opened."""

    def __init__(self, message: str, path: str) -> None:
        super().__init__(message)
        self.path = path


class StorageFileNotFoundError(StorageLocalIOError, FileNotFoundError):
    """A local file referenced by an upload does not exist."""


class StorageNetworkError(StorageError):
    """The request could not be completed (connection failure, timeout)."""


class StorageEncodeError(StorageError):
    """A request body could not be serialised to JSON."""


class StorageDecodeError(StorageError):
    """A successful response body was not the JSON shape we expected."""


class StorageAPIError(StorageError):
    """The storage service answered with a status outside the accepted set.

    Attributes:
        status_code: The HTTP status code of the response.
        message: The ``error`` or ``message`` field of the JSON error body, or
            the raw body text when neither is available.
        body: The raw response body, kept for diagnostics.
    """

    def __init__(self, status_code: int, message: str, body: str) -> None:
        self.status_code = status_code
        self.message = message
        self.body = body
        super().__init__(str(self))

    def __str__(self) -> str:
        detail = self.message if self.message else self.body
        return f"storage service returned status {self.status_code}: {detail}"

    def __repr__(self) -> str:
        return f"StorageAPIError(status_code={self.status_code!r}, message={self.message!r})"


def is_api_error(exc: BaseException | None) -> StorageAPIError | None:
    """Return ``exc`` as a ``StorageAPIError`` if it is one, following ``__cause__`` chains.

    Examples:
        >>> try:
        ...     await client.get_file("missing")
        ... except StorageError as e:
        ...     api_err = is_api_error(e)
        ...     if api_err and api_err.status_code == 404:
        ...         ...
    """
    seen: set[int] = set()
    while exc is not None and id(exc) not in seen:
        if isinstance(exc, StorageAPIError):
            return exc
        seen.add(id(exc))
        exc = exc.__cause__
    return None
