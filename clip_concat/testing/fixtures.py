"""
Test Fixtures - Generated audio for testing.

Provides:
    - Tone / silence / noise generation
    - In-memory WAV files (16-bit PCM or 32-bit float)
    - Ready-made DecodedBuffers
"""

from __future__ import annotations

import struct

import numpy as np

from clip_concat.types import DecodedBuffer


def create_test_audio(
    duration: float = 1.0,
    sample_rate: int = 24000,
    frequency: float = 440.0,
    amplitude: float = 0.5,
    audio_type: str = "tone",
) -> np.ndarray:
    """
    Create test audio data.

    Args:
        duration: Duration in seconds
        sample_rate: Sample rate in Hz
        frequency: Frequency for tone (if audio_type == "tone")
        amplitude: Amplitude (0-1)
        audio_type: Type of audio ("tone", "silence", "noise")

    Returns:
        Float32 numpy array
    """
    num_samples = int(round(duration * sample_rate))

    if audio_type == "silence":
        return np.zeros(num_samples, dtype=np.float32)

    elif audio_type == "tone":
        t = np.arange(num_samples, dtype=np.float64) / sample_rate
        return (np.sin(2 * np.pi * frequency * t) * amplitude).astype(np.float32)

    elif audio_type == "noise":
        rng = np.random.default_rng(0)
        return rng.uniform(-amplitude, amplitude, num_samples).astype(np.float32)

    else:
        raise ValueError(f"Unknown audio_type: {audio_type}")


def create_test_wav(
    samples: np.ndarray,
    sample_rate: int = 24000,
    sample_format: str = "pcm16",
) -> bytes:
    """
    Build WAV file bytes.

    Args:
        samples: (frames,) or (frames, channels) floats in [-1, 1]
        sample_rate: Sample rate in Hz
        sample_format: "pcm16" or "float32"

    Returns:
        Complete WAV file bytes
    """
    samples = np.asarray(samples, dtype=np.float64)
    if samples.ndim == 1:
        samples = samples[:, np.newaxis]
    channels = samples.shape[1]

    if sample_format == "pcm16":
        format_tag, bits = 1, 16
        payload = np.round(np.clip(samples, -1.0, 1.0) * 32767).astype("<i2").tobytes()
    elif sample_format == "float32":
        format_tag, bits = 3, 32
        payload = samples.astype("<f4").tobytes()
    else:
        raise ValueError(f"Unknown sample_format: {sample_format}")

    block_align = channels * bits // 8
    header = struct.pack(
        "<4sI4s4sIHHIIHH4sI",
        b"RIFF",
        36 + len(payload),
        b"WAVE",
        b"fmt ",
        16,
        format_tag,
        channels,
        sample_rate,
        sample_rate * block_align,
        block_align,
        bits,
        b"data",
        len(payload),
    )
    return header + payload


def create_test_clip(
    duration: float = 0.1,
    sample_rate: int = 24000,
    channels: int = 1,
    frequency: float = 440.0,
    amplitude: float = 0.5,
) -> DecodedBuffer:
    """
    Create a DecodedBuffer holding a tone.

    Channel c carries the tone scaled by 1 / (c + 1) so channels are
    distinguishable.
    """
    tone = create_test_audio(duration, sample_rate, frequency, amplitude)
    return DecodedBuffer(
        sample_rate=sample_rate,
        channels=tuple(tone / (c + 1) for c in range(channels)),
        source_format="test",
    )
