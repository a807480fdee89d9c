"""
Clip order helpers.

Stored "audio" values are JSON columns that different writers filled in
different shapes:

    ["path/to/file.wav"]      canonical list
    "path/to/file.wav"        bare string
    '["path/to/file.wav"]'    JSON-encoded list inside a string
    None                      no audio

These helpers normalise them into a clean clip order.
"""

from __future__ import annotations

import json
from typing import Any, Iterable, Mapping, Sequence

from clip_concat.types import Clip


def _clean(items: Iterable[Any]) -> list[str]:
    return [item.strip() for item in items if isinstance(item, str) and item.strip()]


def extract_audio_paths(audio: Any) -> list[str]:
    """
    Normalise a stored audio value to a list of paths.

    Args:
        audio: List, string, JSON-array string, or None

    Returns:
        Non-blank, stripped paths in stored order
    """
    if audio is None:
        return []

    if isinstance(audio, (list, tuple)):
        return _clean(audio)

    if isinstance(audio, str):
        trimmed = audio.strip()
        if not trimmed:
            return []

        if trimmed.startswith("["):
            try:
                parsed = json.loads(trimmed)
            except ValueError:
                parsed = None  # not JSON, treat as a literal path
            if isinstance(parsed, list):
                return _clean(parsed)

        return [trimmed]

    return []


def has_audio_paths(audio: Any) -> bool:
    """Check if a stored audio value holds at least one path."""
    return bool(extract_audio_paths(audio))


def build_clip_order(entries: Iterable[Any], key: str = "audio") -> list[str]:
    """
    Flatten ordered entries into one clip order.

    Args:
        entries: Ordered records. Mappings contribute their `key` value;
            anything else is treated as a raw audio value.
        key: Field holding the audio value in mapping entries

    Returns:
        Clip references in entry order, then stored order within an entry

    Example:
        rows = [{"audio": ["a.wav", "b.wav"]}, {"audio": None}, {"audio": "c.webm"}]
        build_clip_order(rows)  # ["a.wav", "b.wav", "c.webm"]
    """
    order: list[str] = []
    for entry in entries:
        value = entry.get(key) if isinstance(entry, Mapping) else entry
        order.extend(extract_audio_paths(value))
    return order


def prepare_clips(clip_order: Sequence[str]) -> list[Clip]:
    """
    Drop blank references and strip the rest.

    Indices refer to positions in the caller's clip order so errors
    point at the reference the caller supplied.
    """
    clips: list[Clip] = []
    for index, reference in enumerate(clip_order):
        if isinstance(reference, str) and reference.strip():
            clips.append(Clip(index=index, reference=reference.strip()))
    return clips
