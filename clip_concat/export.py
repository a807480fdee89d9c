"""
Export naming helpers.

The engine returns bare WAV bytes and never names them. These helpers
give callers the conventional download name:

    {context}-{timestamp}-{actor}.wav

e.g. "Genesis-1-2026-10-19T143005.120Z-Ana-Lima.wav"
"""

from __future__ import annotations

import re
from datetime import datetime, timezone

WAV_CONTENT_TYPE = "audio/wav"

_WHITESPACE = re.compile(r"\s+")
_UNSAFE = re.compile(r"[^A-Za-z0-9\-_.]")


def sanitize_name(name: str, fallback: str = "untitled") -> str:
    """Collapse whitespace to '-' and drop characters outside [A-Za-z0-9-_.]."""
    cleaned = _UNSAFE.sub("", _WHITESPACE.sub("-", name.strip()))
    return cleaned or fallback


def format_timestamp(timestamp: datetime | None = None) -> str:
    """ISO 8601 UTC timestamp with millisecond precision and no colons."""
    if timestamp is None:
        timestamp = datetime.now(timezone.utc)
    elif timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=timezone.utc)
    timestamp = timestamp.astimezone(timezone.utc)
    return f"{timestamp:%Y-%m-%dT%H%M%S}.{timestamp.microsecond // 1000:03d}Z"


def suggest_filename(
    context_name: str,
    actor_name: str,
    timestamp: datetime | None = None,
) -> str:
    """
    Build the suggested download name for an export.

    Args:
        context_name: What was exported (chapter, quest, ...)
        actor_name: Who exported it
        timestamp: Export time (default: now, UTC)

    Returns:
        "{context}-{timestamp}-{actor}.wav"
    """
    return (
        f"{sanitize_name(context_name)}-{format_timestamp(timestamp)}-"
        f"{sanitize_name(actor_name, fallback='user')}.wav"
    )
