"""Client configuration for the storage service."""

from __future__ import annotations

import os
from dataclasses import dataclass, field

from ._errors import StorageConfigError

API_PATH_PREFIX = "/api/v1"
DEFAULT_TIMEOUT = 10.0

ENV_BASE_URL = "STORAGE_SERVICE_URL"
ENV_TIMEOUT = "STORAGE_SERVICE_TIMEOUT"


@dataclass(frozen=True)
class ClientConfig:
    """Immutable connection settings for a ``StorageClient``.

    Examples:
        >>> config = ClientConfig("http://localhost:3003/")
        >>> config.base_url
        'http://localhost:3003'
        >>> config.timeout
        10.0
    """

    base_url: str
    timeout: float | None = field(default=None)

    def __post_init__(self) -> None:
        if not self.base_url:
            raise StorageConfigError("base URL is required")
        object.__setattr__(self, "base_url", self.base_url.rstrip("/"))
        if not self.timeout:
            object.__setattr__(self, "timeout", DEFAULT_TIMEOUT)

    @property
    def api_url(self) -> str:
        return self.base_url + API_PATH_PREFIX

    @classmethod
    def from_env(cls) -> ClientConfig:
        """Build a config from ``STORAGE_SERVICE_URL`` and ``STORAGE_SERVICE_TIMEOUT``.

        Raises:
            StorageConfigError: If the URL is unset or the timeout is not a number.
        """
        base_url = os.environ.get(ENV_BASE_URL, "")
        if not base_url:
            raise StorageConfigError(f"{ENV_BASE_URL} is not set")

        raw_timeout = os.environ.get(ENV_TIMEOUT)
        timeout: float | None = None
        if raw_timeout:
            try:
                timeout = float(raw_timeout)
            except ValueError as e:
                raise StorageConfigError(f"{ENV_TIMEOUT} must be a number of seconds, got {raw_timeout!r}") from e

        return cls(base_url=base_url, timeout=timeout)
