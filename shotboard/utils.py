"""
shotboard.utils - Shared utility functions.

Formatting helpers used by the CLI and file output.
"""

from __future__ import annotations

import mimetypes
from pathlib import Path


def format_duration(seconds: float) -> str:
    """Format seconds as H:MM:SS or M:SS."""
    hours = int(seconds // 3600)
    minutes = int((seconds % 3600) // 60)
    secs = int(seconds % 60)
    if hours > 0:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"


def estimate_batch_seconds(shot_count: int, delay_seconds: float) -> float:
    """Minimum wall time a batch spends in inter-request delays."""
    return max(shot_count - 1, 0) * delay_seconds


def image_filename(identifier: str, extension: str = ".png") -> str:
    """Download name for a shot's image, e.g. storyboard_shot_Shot_1.png."""
    return f"storyboard_shot_{identifier.replace(' ', '_')}{extension}"


def guess_mime_type(path: Path) -> str:
    """Image mime type from a file name, defaulting to PNG."""
    mime_type, _ = mimetypes.guess_type(path.name)
    if mime_type and mime_type.startswith("image/"):
        return mime_type
    return "image/png"


def truncate(text: str, limit: int = 80) -> str:
    """Collapse whitespace and cut text to limit characters."""
    flat = " ".join(text.split())
    if len(flat) <= limit:
        return flat
    return flat[: limit - 1].rstrip() + "…"
