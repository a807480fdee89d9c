"""
Shared fixtures for clip_concat tests.

Provides:
    - Tone / stereo / alternate-rate WAV payloads
    - A MockResolver preloaded with those payloads
    - A structured logger writing to an in-memory stream
"""

from __future__ import annotations

import io
import json

import numpy as np
import pytest

from clip_concat.monitoring import LogLevel, StructuredLogger
from clip_concat.testing import MockResolver, create_test_audio, create_test_wav


@pytest.fixture
def tone_wav() -> bytes:
    """0.1 s mono 440 Hz tone at 24 kHz (2400 frames)."""
    return create_test_wav(create_test_audio(duration=0.1, sample_rate=24000), 24000)


@pytest.fixture
def short_wav() -> bytes:
    """0.05 s mono 880 Hz tone at 24 kHz (1200 frames)."""
    tone = create_test_audio(duration=0.05, sample_rate=24000, frequency=880)
    return create_test_wav(tone, 24000)


@pytest.fixture
def stereo_wav() -> bytes:
    """0.05 s stereo tone at 24 kHz, right channel at half level."""
    tone = create_test_audio(duration=0.05, sample_rate=24000)
    return create_test_wav(np.stack([tone, tone / 2], axis=1), 24000)


@pytest.fixture
def wav_48k() -> bytes:
    """0.1 s mono tone at 48 kHz (4800 frames)."""
    return create_test_wav(create_test_audio(duration=0.1, sample_rate=48000), 48000)


@pytest.fixture
def resolver(tone_wav, short_wav, stereo_wav, wav_48k) -> MockResolver:
    return MockResolver({
        "a": tone_wav,
        "b": short_wav,
        "c": tone_wav,
        "stereo": stereo_wav,
        "48k": wav_48k,
        "garbage": b"this is not audio at all",
    })


class LogCapture:
    """In-memory StructuredLogger output, parsed back into records."""

    def __init__(self) -> None:
        self.stream = io.StringIO()
        self.logger = StructuredLogger("test", level=LogLevel.DEBUG, output=self.stream)

    @property
    def records(self) -> list[dict]:
        return [json.loads(line) for line in self.stream.getvalue().splitlines() if line]

    def events(self) -> list[str]:
        return [r["event"] for r in self.records]


@pytest.fixture
def log_capture() -> LogCapture:
    return LogCapture()
