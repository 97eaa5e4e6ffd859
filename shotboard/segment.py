"""
shotboard.segment - Script to shot segmentation.

Splits script text into paragraphs (or sentences) and groups them into
numbered shots. Pure functions, no service calls.
"""

from __future__ import annotations

import re

from shotboard.exceptions import SegmentationError
from shotboard.models import Scene

PARAGRAPH_BREAK = re.compile(r"\n\s*\n")
SENTENCE = re.compile(r"[^.!?]+[.!?]+")

SEGMENT_UNITS = ("paragraph", "sentence")


def shot_identifier(index: int) -> str:
    """Identifier for the shot at a zero-based position."""
    return f"Shot {index + 1}"


def split_paragraphs(script: str) -> list[str]:
    """Split text on blank lines, dropping empty paragraphs.

    Args:
        script: Raw script text

    Returns:
        Stripped, non-empty paragraphs in order
    """
    text = script.replace("\r\n", "\n").replace("\r", "\n")
    paragraphs = (p.strip() for p in PARAGRAPH_BREAK.split(text))
    return [p for p in paragraphs if p]


def split_sentences(script: str) -> list[str]:
    """Split text into sentences ending in '.', '!' or '?'.

    Trailing text without a terminator is dropped, matching how the
    sentence grouping has always behaved.
    """
    sentences = (s.strip() for s in SENTENCE.findall(script))
    return [s for s in sentences if s]


def _chunk(items: list[str], size: int) -> list[list[str]]:
    return [items[i : i + size] for i in range(0, len(items), size)]


def segment(script: str, group_size: int, unit: str = "paragraph") -> list[Scene]:
    """Turn a script into an ordered list of shots.

    Consecutive units are grouped ``group_size`` at a time. Paragraph groups
    are rejoined with a blank line, sentence groups with a single space.
    Each group becomes one Scene whose original text and initial visual
    description are the joined group, numbered "Shot 1", "Shot 2", ...

    Args:
        script: Script text
        group_size: Paragraphs (or sentences) per shot, at least 1
        unit: "paragraph" or "sentence"

    Returns:
        List of Scene objects; empty for an empty or whitespace-only script

    Raises:
        SegmentationError: If the input or group size is invalid
    """
    if not isinstance(script, str):
        raise SegmentationError(f"Script must be text, got {type(script).__name__}")
    if isinstance(group_size, bool) or not isinstance(group_size, int) or group_size < 1:
        raise SegmentationError(f"group_size must be a positive integer, got {group_size!r}")
    if unit not in SEGMENT_UNITS:
        raise SegmentationError(f"Unknown segment unit: {unit}")

    if not script.strip():
        return []

    if unit == "paragraph":
        units = split_paragraphs(script)
        separator = "\n\n"
    else:
        units = split_sentences(script)
        separator = " "
        if not units:
            units = [script.strip()]

    scenes = []
    for index, chunk in enumerate(_chunk(units, group_size)):
        text = separator.join(chunk)
        scenes.append(
            Scene(
                identifier=shot_identifier(index),
                original_text=text,
                visual_description=text,
            )
        )
    return scenes
