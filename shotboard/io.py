"""
shotboard.io - Script reading and atomic file writes.

Used by the CLI to read scripts and to save generated images on request.
"""

from __future__ import annotations

import tempfile
from pathlib import Path

from shotboard.images.handles import decode_handle, extension_for
from shotboard.utils import image_filename


def read_text(path: Path) -> str:
    """Read text file with UTF-8 encoding.

    Args:
        path: Path to text file

    Returns:
        File contents as string
    """
    with open(path, encoding="utf-8") as f:
        return f.read()


def write_bytes(path: Path, content: bytes) -> None:
    """Write binary file atomically.

    Writes to a temp file first, then renames to prevent a half-written
    image on interruption.

    Args:
        path: Destination path
        content: Bytes to write
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    with tempfile.NamedTemporaryFile(
        mode="wb",
        dir=path.parent,
        delete=False,
        suffix=".tmp",
    ) as tmp:
        tmp_path = Path(tmp.name)
        try:
            tmp.write(content)
        except Exception:
            tmp_path.unlink(missing_ok=True)
            raise
    tmp_path.replace(path)


def save_image(handle: str, output_dir: Path, identifier: str) -> Path:
    """Save an image handle to output_dir under the shot's download name.

    Args:
        handle: Data URI image handle
        output_dir: Destination directory
        identifier: Shot identifier, e.g. "Shot 3"

    Returns:
        Path of the written file

    Raises:
        ValueError: If the handle cannot be decoded
    """
    data, mime_type = decode_handle(handle)
    path = output_dir / image_filename(identifier, extension_for(mime_type))
    write_bytes(path, data)
    return path


def load_image(path: Path) -> bytes:
    """Read an image file as bytes."""
    with open(path, "rb") as f:
        return f.read()
