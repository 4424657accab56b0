"""Content-type detection for multipart upload parts using puremagic and mimetypes."""

from __future__ import annotations

import mimetypes

import puremagic

DEFAULT_CONTENT_TYPE = "application/octet-stream"

# Enough for every signature puremagic ships.
SNIFF_SIZE = 2048


def detect_from_bytes(data: bytes) -> str | None:
    """Detect a MIME type from leading bytes using magic number signatures.

    Args:
        data: The first few hundred bytes of a file.

    Returns:
        The best-matching MIME type, or ``None`` if nothing matched.
    """
    if not data:
        return None

    try:
        matches = puremagic.magic_string(data)
    except puremagic.PureError:
        return None

    for match in matches:
        if match.mime_type:
            return match.mime_type
    return None


def detect_from_name(filename: str) -> str | None:
    """Guess a MIME type from a filename's extension."""
    if not filename:
        return None
    mime_type, _ = mimetypes.guess_type(filename)
    return mime_type


def detect_content_type(head: bytes, filename: str) -> str:
    """Pick the ``Content-Type`` for an upload part.

    Sniffs ``head`` (the first ``SNIFF_SIZE`` bytes of the file), then falls
    back to the filename extension, then to ``application/octet-stream``.

    Examples:
        >>> detect_content_type(png_head, "photo.png")
        'image/png'
    """
    return detect_from_bytes(head) or detect_from_name(filename) or DEFAULT_CONTENT_TYPE
