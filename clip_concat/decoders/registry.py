"""
Decoder Registry - Sniff the payload and dispatch to the right decoder.
"""

from __future__ import annotations

import logging
from typing import Iterable

from clip_concat.decoders.base import Decoder
from clip_concat.errors import DecodeError, UnsupportedEncodingError
from clip_concat.formats.detect import AudioFormat, detect_format
from clip_concat.types import DecodedBuffer

logger = logging.getLogger(__name__)


class DecoderRegistry:
    """Ordered set of decoders keyed by the formats they accept.

    For a given payload every decoder that accepts the sniffed format is
    tried in registration order. UnsupportedEncodingError moves on to the
    next candidate; any other DecodeError is final, so a truncated stream
    is never "rescued" by a more lenient decoder.

    The registry holds no per-call state and can be shared across runs.

    Example:
        registry = DecoderRegistry([PcmWavDecoder(), SoundFileDecoder()])
        buffer = registry.decode(payload)
    """

    def __init__(self, decoders: Iterable[Decoder] = ()):
        self._decoders: list[Decoder] = list(decoders)

    @property
    def decoders(self) -> list[Decoder]:
        return list(self._decoders)

    def register(self, decoder: Decoder) -> None:
        """Append a decoder (lowest priority)."""
        self._decoders.append(decoder)

    def candidates(self, fmt: AudioFormat) -> list[Decoder]:
        """Decoders accepting a format, in priority order."""
        return [d for d in self._decoders if fmt in d.formats]

    def decode(self, data: bytes) -> DecodedBuffer:
        """
        Decode one clip payload.

        Args:
            data: Clip bytes of any supported encoding

        Returns:
            DecodedBuffer at the source's native rate and channel count

        Raises:
            DecodeError: If the payload is empty, unrecognised, corrupt, or
                no registered decoder supports its codec
        """
        if not data:
            raise DecodeError("Empty audio payload", diagnostic="stream truncated at 0 bytes")

        fmt = detect_format(data)
        if fmt == AudioFormat.UNKNOWN:
            raise DecodeError(
                "Unrecognised audio encoding",
                diagnostic=f"leading bytes {bytes(data[:12]).hex()}",
                format=fmt.value,
            )

        candidates = self.candidates(fmt)
        if not candidates:
            raise DecodeError(f"No decoder registered for {fmt.value}", format=fmt.value)

        last_error: UnsupportedEncodingError | None = None
        for decoder in candidates:
            try:
                return decoder.decode(data)
            except UnsupportedEncodingError as e:
                logger.debug(f"Decoder {decoder.name} declined {fmt.value}: {e.diagnostic or e.message}")
                last_error = e

        raise DecodeError(
            f"Unsupported {fmt.value} encoding",
            diagnostic=last_error.diagnostic or last_error.message if last_error else None,
            format=fmt.value,
        ) from last_error


def load_registry() -> DecoderRegistry:
    """Build the registry with every bundled decoder.

    Priority: numpy WAV reader, then libsndfile, then ffmpeg.
    """
    from clip_concat.decoders.wav import PcmWavDecoder
    from clip_concat.decoders.sndfile import SoundFileDecoder
    from clip_concat.decoders.ffmpeg import FfmpegDecoder

    return DecoderRegistry([PcmWavDecoder(), SoundFileDecoder(), FfmpegDecoder()])


_default_registry: DecoderRegistry | None = None


def default_registry() -> DecoderRegistry:
    """Process-wide registry, built on first use."""
    global _default_registry

    if _default_registry is None:
        _default_registry = load_registry()

    return _default_registry


def decode(data: bytes) -> DecodedBuffer:
    """Decode one clip payload with the default registry."""
    return default_registry().decode(data)
