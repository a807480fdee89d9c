"""
Decoder Base - Decoder protocol.

All decoders implement decode(bytes) -> DecodedBuffer.

DECODER CONTRACT:
    Decoders MUST:
        - Accept the complete clip payload as bytes
        - Return float32 PCM in [-1, 1], one array per channel
        - Keep the source's native sample rate and channel count
        - Raise DecodeError for truncated or corrupt input
        - Raise UnsupportedEncodingError when they recognise the
          container but not the codec, so the registry can try the
          next decoder

    Decoders MUST NOT:
        - Resample or mix channels (that's merger work)
        - Guess the format from a filename
        - Keep state between calls
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Protocol, runtime_checkable

import numpy as np

from clip_concat.formats.detect import AudioFormat
from clip_concat.types import DecodedBuffer


@runtime_checkable
class Decoder(Protocol):
    """Protocol for clip decoders.

    A decoder turns one clip's bytes into a DecodedBuffer. The registry
    picks decoders by sniffed format, so each decoder declares the
    formats it handles.
    """

    @property
    def name(self) -> str:
        """Decoder identifier (e.g., 'wav', 'soundfile')."""
        ...

    @property
    def formats(self) -> frozenset[AudioFormat]:
        """Formats this decoder accepts."""
        ...

    def decode(self, data: bytes) -> DecodedBuffer:
        """Decode a complete clip payload.

        Args:
            data: Clip bytes

        Returns:
            DecodedBuffer at the source's native rate and channel count
        """
        ...


class BaseDecoder(ABC):
    """Base class for decoders with common functionality."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Decoder identifier."""
        ...

    @property
    @abstractmethod
    def formats(self) -> frozenset[AudioFormat]:
        """Formats this decoder accepts."""
        ...

    @abstractmethod
    def decode(self, data: bytes) -> DecodedBuffer:
        """Decode a complete clip payload."""
        ...

    def supports(self, fmt: AudioFormat) -> bool:
        """Check if this decoder accepts a format."""
        return fmt in self.formats

    @staticmethod
    def _to_buffer(
        samples: np.ndarray,
        sample_rate: int,
        fmt: AudioFormat,
    ) -> DecodedBuffer:
        """Wrap a (frames, channels) array as a DecodedBuffer."""
        return DecodedBuffer.from_interleaved(samples, sample_rate, source_format=fmt.value)
