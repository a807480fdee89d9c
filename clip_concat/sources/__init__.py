"""
Clip sources - where clip bytes come from.
"""

from clip_concat.sources.clips import (
    build_clip_order,
    extract_audio_paths,
    has_audio_paths,
    prepare_clips,
)
from clip_concat.sources.resolvers import (
    DataUrlResolver,
    FileResolver,
    HttpResolver,
    SchemeResolver,
    default_resolver,
)

__all__ = [
    "build_clip_order",
    "extract_audio_paths",
    "has_audio_paths",
    "prepare_clips",
    "DataUrlResolver",
    "FileResolver",
    "HttpResolver",
    "SchemeResolver",
    "default_resolver",
]
