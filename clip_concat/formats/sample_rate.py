"""
Sample rate conversion utilities.

The merger adopts the first clip's sample rate and resamples every other
clip to it. Resampling is deterministic for a given quality level so the
same export always produces the same bytes.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from math import gcd
from typing import Protocol, runtime_checkable

import numpy as np
from scipy import signal


class ResamplingQuality(Enum):
    """Quality level for resampling."""
    FAST = "fast"           # Linear interpolation
    MEDIUM = "medium"       # Cubic interpolation
    HIGH = "high"           # Windowed sinc (polyphase)


@runtime_checkable
class Resampler(Protocol):
    """Anything that can move a 1-D signal from one rate to another."""

    def resample(self, samples: np.ndarray, from_rate: int, to_rate: int) -> np.ndarray:
        ...


def resampled_length(frames: int, from_rate: int, to_rate: int) -> int:
    """
    Number of output frames for a clip of `frames` frames.

    round(frames * to_rate / from_rate), halves rounded up, computed in
    integer arithmetic so long clips do not drift.
    """
    return (frames * to_rate * 2 + from_rate) // (from_rate * 2)


@dataclass
class SampleRateConverter:
    """
    Sample rate converter with configurable quality.

    Output sample k sits at source position k * from_rate / to_rate, so
    every clip starts exactly on its first sample and keeps its duration.

    Attributes:
        quality: Resampling quality level
    """
    quality: ResamplingQuality = ResamplingQuality.FAST

    def resample(
        self,
        samples: np.ndarray,
        from_rate: int,
        to_rate: int,
    ) -> np.ndarray:
        """
        Convert sample rate of a single channel.

        Args:
            samples: Input samples (1-D)
            from_rate: Source sample rate
            to_rate: Target sample rate

        Returns:
            Resampled float32 samples of length resampled_length()
        """
        if from_rate <= 0 or to_rate <= 0:
            raise ValueError(f"Sample rates must be positive: {from_rate} -> {to_rate}")

        samples = np.asarray(samples, dtype=np.float32)
        if from_rate == to_rate:
            return samples.copy()

        new_length = resampled_length(len(samples), from_rate, to_rate)
        if len(samples) == 0 or new_length == 0:
            return np.zeros(0, dtype=np.float32)

        if self.quality == ResamplingQuality.FAST:
            return self._linear_resample(samples, from_rate, to_rate, new_length)
        elif self.quality == ResamplingQuality.MEDIUM:
            return self._cubic_resample(samples, from_rate, to_rate, new_length)
        else:  # HIGH
            return self._polyphase_resample(samples, from_rate, to_rate, new_length)

    @staticmethod
    def _positions(from_rate: int, to_rate: int, new_length: int) -> np.ndarray:
        return np.arange(new_length, dtype=np.float64) * (from_rate / to_rate)

    def _linear_resample(
        self,
        samples: np.ndarray,
        from_rate: int,
        to_rate: int,
        new_length: int,
    ) -> np.ndarray:
        """Linear interpolation resampling."""
        positions = self._positions(from_rate, to_rate, new_length)
        source = samples.astype(np.float64)
        # np.interp holds the last sample for positions past the end
        return np.interp(positions, np.arange(len(source)), source).astype(np.float32)

    def _cubic_resample(
        self,
        samples: np.ndarray,
        from_rate: int,
        to_rate: int,
        new_length: int,
    ) -> np.ndarray:
        """Catmull-Rom cubic interpolation resampling."""
        source = samples.astype(np.float64)
        last = len(source) - 1
        positions = np.minimum(self._positions(from_rate, to_rate, new_length), last)

        idx = np.floor(positions).astype(np.int64)
        frac = positions - idx

        # 4 surrounding samples, edges clamped
        p0 = source[np.clip(idx - 1, 0, last)]
        p1 = source[idx]
        p2 = source[np.clip(idx + 1, 0, last)]
        p3 = source[np.clip(idx + 2, 0, last)]

        result = (
            (-0.5 * p0 + 1.5 * p1 - 1.5 * p2 + 0.5 * p3) * frac**3 +
            (p0 - 2.5 * p1 + 2 * p2 - 0.5 * p3) * frac**2 +
            (-0.5 * p0 + 0.5 * p2) * frac +
            p1
        )
        return result.astype(np.float32)

    def _polyphase_resample(
        self,
        samples: np.ndarray,
        from_rate: int,
        to_rate: int,
        new_length: int,
    ) -> np.ndarray:
        """Windowed sinc resampling through scipy's polyphase filter."""
        g = gcd(from_rate, to_rate)
        up = to_rate // g
        down = from_rate // g

        result = signal.resample_poly(
            samples.astype(np.float64),
            up,
            down,
            window=("kaiser", 5.0),
            padtype="line",
        )

        # resample_poly yields ceil(n * up / down) samples
        if len(result) >= new_length:
            result = result[:new_length]
        else:
            result = np.pad(result, (0, new_length - len(result)), mode="edge")
        return result.astype(np.float32)


def convert_sample_rate(
    samples: np.ndarray,
    from_rate: int,
    to_rate: int,
    quality: ResamplingQuality = ResamplingQuality.FAST,
) -> np.ndarray:
    """
    Convert sample rate of a single channel.

    Convenience function that creates a converter with specified quality.

    Example:
        # Bring a 22.05 kHz clip up to a 48 kHz export
        audio_48k = convert_sample_rate(audio_22k, 22050, 48000)
    """
    converter = SampleRateConverter(quality=quality)
    return converter.resample(samples, from_rate, to_rate)
