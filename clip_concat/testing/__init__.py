"""
Testing Utilities

Tools for testing code that runs exports.

Components:
    MockResolver       - In-memory resolver with call recording
    RecordingRegistry  - Decoder registry that records calls
    create_test_*      - Generated audio, WAV bytes, decoded clips

Usage:
    from clip_concat.testing import MockResolver, create_test_audio, create_test_wav

    tone = create_test_audio(duration=0.5, frequency=440)
    resolver = MockResolver({"clip-1": create_test_wav(tone, 24000)})
    wav = concatenate(["clip-1"], resolver)
"""

from clip_concat.testing.mock import (
    CallRecord,
    MockResolver,
    RecordingRegistry,
)

from clip_concat.testing.fixtures import (
    create_test_audio,
    create_test_clip,
    create_test_wav,
)

__all__ = [
    # Mock
    "CallRecord",
    "MockResolver",
    "RecordingRegistry",
    # Fixtures
    "create_test_audio",
    "create_test_clip",
    "create_test_wav",
]
