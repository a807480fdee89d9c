"""
Core data types for the concatenation engine.

DecodedBuffer and MergedAudio are the two PCM containers that flow
through the pipeline:

    bytes → Decoder → DecodedBuffer → Merger → MergedAudio → Encoder → WAV bytes

Samples are float32 in [-1, 1], stored one array per channel.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Sequence

import numpy as np


ClipReference = str
"""Opaque identifier, path, or URL for one clip. Supplied by the caller."""

ClipOrder = Sequence[str]
"""Ordered clip references. Order is the concatenation order."""

ResolveFn = Callable[[str], bytes]
"""Maps a clip reference to the clip's raw bytes."""


class Phase(str, Enum):
    """Pipeline phases reported through progress events."""

    DOWNLOADING = "downloading"
    DECODING = "decoding"
    ENCODING = "encoding"


@dataclass(frozen=True)
class ProgressEvent:
    """A progress update emitted during an export run.

    Attributes:
        phase: Current pipeline phase.
        current: Items completed (or the 1-based clip being processed).
        total: Total items in this phase.
    """

    phase: Phase
    current: int
    total: int

    def to_dict(self) -> dict[str, Any]:
        return {"phase": self.phase.value, "current": self.current, "total": self.total}


ProgressCallback = Callable[[ProgressEvent], None]


@dataclass(frozen=True)
class Clip:
    """A non-blank clip reference and its position in the caller's clip order."""

    index: int
    reference: str


def _freeze_channel(samples: Any) -> np.ndarray:
    array = np.array(samples, dtype=np.float32, copy=True)
    if array.ndim != 1:
        raise ValueError(f"Channel data must be 1-D, got shape {array.shape}")
    array.setflags(write=False)
    return array


@dataclass(frozen=True, eq=False)
class DecodedBuffer:
    """PCM audio decoded from one clip.

    Channel arrays are copied to float32 and made read-only, so a buffer
    cannot change after the decoder hands it over.

    Attributes:
        sample_rate: Native sample rate of the source in Hz.
        channels: One sample array per channel, all the same length.
        source_format: Name of the sniffed container format.
    """

    sample_rate: int
    channels: tuple[np.ndarray, ...]
    source_format: str = ""

    def __post_init__(self) -> None:
        if self.sample_rate <= 0:
            raise ValueError(f"sample_rate must be positive, got {self.sample_rate}")
        channels = tuple(_freeze_channel(ch) for ch in self.channels)
        if not channels:
            raise ValueError("DecodedBuffer needs at least one channel")
        lengths = {len(ch) for ch in channels}
        if len(lengths) != 1:
            raise ValueError(f"Channel lengths differ: {sorted(lengths)}")
        object.__setattr__(self, "channels", channels)

    @classmethod
    def from_interleaved(
        cls,
        samples: np.ndarray,
        sample_rate: int,
        source_format: str = "",
    ) -> "DecodedBuffer":
        """Build a buffer from a (frames,) or (frames, channels) array."""
        samples = np.asarray(samples)
        if samples.ndim == 1:
            samples = samples[:, np.newaxis]
        if samples.ndim != 2:
            raise ValueError(f"Expected (frames, channels) samples, got shape {samples.shape}")
        return cls(
            sample_rate=sample_rate,
            channels=tuple(samples[:, ch] for ch in range(samples.shape[1])),
            source_format=source_format,
        )

    @property
    def channel_count(self) -> int:
        return len(self.channels)

    @property
    def frame_count(self) -> int:
        return len(self.channels[0])

    @property
    def duration_seconds(self) -> float:
        return self.frame_count / self.sample_rate


@dataclass
class MergedAudio:
    """Concatenated multi-channel audio, ready for encoding.

    The merger guarantees equal channel lengths. The encoder re-checks
    this and raises InvariantViolation instead of trusting it.
    """

    sample_rate: int
    channels: list[np.ndarray] = field(default_factory=list)

    @property
    def channel_count(self) -> int:
        return len(self.channels)

    @property
    def frame_count(self) -> int:
        return len(self.channels[0]) if self.channels else 0

    @property
    def duration_seconds(self) -> float:
        return self.frame_count / self.sample_rate if self.sample_rate else 0.0

    def interleaved(self) -> np.ndarray:
        """Return samples as a (frames, channels) array."""
        return np.stack(self.channels, axis=1)
