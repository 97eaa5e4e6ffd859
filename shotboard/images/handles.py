"""
shotboard.images.handles - Image handle helpers.

Image handles are opaque to the core; the image client produces base64
data URIs ("data:image/png;base64,...") that can be rendered directly or
decoded for saving.
"""

from __future__ import annotations

import base64
import binascii
import re

DATA_URI = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+);base64,(?P<data>.*)$", re.DOTALL)

EXTENSIONS = {
    "image/png": ".png",
    "image/jpeg": ".jpg",
    "image/webp": ".webp",
}


def to_data_uri(data: bytes, mime_type: str = "image/png") -> str:
    """Wrap raw image bytes in a data URI handle."""
    return f"data:{mime_type};base64,{base64.b64encode(data).decode('ascii')}"


def b64_to_data_uri(b64_data: str, mime_type: str = "image/png") -> str:
    """Wrap an already base64-encoded payload in a data URI handle."""
    return f"data:{mime_type};base64,{b64_data}"


def is_data_uri(handle: str) -> bool:
    return bool(DATA_URI.match(handle))


def decode_handle(handle: str) -> tuple[bytes, str]:
    """Decode a data URI handle.

    Args:
        handle: Image handle produced by the image client

    Returns:
        Tuple of (image bytes, mime type)

    Raises:
        ValueError: If the handle is not a base64 data URI
    """
    match = DATA_URI.match(handle)
    if not match:
        raise ValueError("Image handle is not a base64 data URI")
    try:
        data = base64.b64decode(match.group("data"), validate=True)
    except binascii.Error as e:
        raise ValueError(f"Image handle has invalid base64 payload: {e}") from e
    return data, match.group("mime")


def extension_for(mime_type: str) -> str:
    """File extension for a mime type, defaulting to .png."""
    return EXTENSIONS.get(mime_type, ".png")
