"""Shared fixtures for storage-sdk tests."""

from __future__ import annotations

import os
import struct
import tempfile
from typing import Any

import pytest

from storage_sdk import StorageClient

BASE_URL = "http://storage.test"
API_URL = BASE_URL + "/api/v1"


# ---------------------------------------------------------------------------
# Byte fixtures
# ---------------------------------------------------------------------------

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"


def _make_png_bytes() -> bytes:
    """Build a minimal valid 1x1 PNG."""
    import zlib

    def _chunk(chunk_type: bytes, data: bytes) -> bytes:
        raw = chunk_type + data
        crc = struct.pack(">I", zlib.crc32(raw) & 0xFFFFFFFF)
        length = struct.pack(">I", len(data))
        return length + raw + crc

    ihdr_data = struct.pack(">IIBBBBB", 1, 1, 8, 2, 0, 0, 0)  # 1x1, 8-bit RGB
    compressed = zlib.compress(b"\x00\xff\x00\x00")

    return PNG_SIGNATURE + _chunk(b"IHDR", ihdr_data) + _chunk(b"IDAT", compressed) + _chunk(b"IEND", b"")


@pytest.fixture()
def png_bytes() -> bytes:
    return _make_png_bytes()


@pytest.fixture()
def text_bytes() -> bytes:
    return b"Hello, world! This is a plain text file for testing."


# ---------------------------------------------------------------------------
# Temporary file fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def tmp_dir():
    """Provide a temporary directory that is cleaned up after the test."""
    with tempfile.TemporaryDirectory() as d:
        yield d


@pytest.fixture()
def tmp_text_file(tmp_dir: str, text_bytes: bytes) -> str:
    p = os.path.join(tmp_dir, "example.txt")
    with open(p, "wb") as f:
        f.write(text_bytes)
    return p


@pytest.fixture()
def tmp_png_file(tmp_dir: str, png_bytes: bytes) -> str:
    p = os.path.join(tmp_dir, "icon.png")
    with open(p, "wb") as f:
        f.write(png_bytes)
    return p


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------


@pytest.fixture()
async def client():
    """A client pointed at the mocked storage service."""
    c = StorageClient(BASE_URL, timeout=5)
    yield c
    await c.aclose()


# ---------------------------------------------------------------------------
# Payload builders
# ---------------------------------------------------------------------------


def file_item(file_id: str = "f-1", **overrides: Any) -> dict[str, Any]:
    """A file record as the service serialises it."""
    item: dict[str, Any] = {
        "id": file_id,
        "originalName": "example.txt",
        "storedName": f"{file_id}.txt",
        "filePath": f"uploads/2025/01/{file_id}.txt",
        "fileSize": 52,
        "mimeType": "text/plain",
        "extension": "txt",
        "fileType": "document",
        "hash": "9f86d081884c7d659a2feaa0c55ad015",
        "status": "active",
        "metadata": {"owner": "ops"},
        "createdAt": "2025-01-01T10:00:00Z",
        "updatedAt": "2025-01-02T11:30:00.123456789Z",
    }
    item.update(overrides)
    return item


def envelope(data: Any = None, status: int = 200, message: str = "ok", **extra: Any) -> dict[str, Any]:
    body: dict[str, Any] = {"success": 200 <= status < 300, "message": message, "status": status}
    if data is not None:
        body["data"] = data
    body.update(extra)
    return body
