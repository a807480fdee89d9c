"""
SoundFile Decoder - libsndfile-backed decoding.

Covers FLAC, Ogg/Vorbis, Ogg/Opus, MP3 (libsndfile >= 1.1), AIFF and the
WAV codecs the numpy reader leaves alone (ADPCM, A-law, mu-law, ...).
"""

from __future__ import annotations

import io
import logging

import numpy as np
import soundfile as sf

from clip_concat.decoders.base import BaseDecoder
from clip_concat.errors import DecodeError, UnsupportedEncodingError
from clip_concat.formats.detect import AudioFormat, detect_format
from clip_concat.types import DecodedBuffer

logger = logging.getLogger(__name__)

# libsndfile messages meaning "this build cannot read the codec"
_UNSUPPORTED_MARKERS = ("not recognised", "not recognized", "unsupported", "unknown format")


class SoundFileDecoder(BaseDecoder):
    """Decoder for every container libsndfile can read from memory."""

    @property
    def name(self) -> str:
        return "soundfile"

    @property
    def formats(self) -> frozenset[AudioFormat]:
        return frozenset({
            AudioFormat.WAV,
            AudioFormat.FLAC,
            AudioFormat.OGG_VORBIS,
            AudioFormat.OGG_OPUS,
            AudioFormat.OGG,
            AudioFormat.MP3,
            AudioFormat.AIFF,
        })

    def decode(self, data: bytes) -> DecodedBuffer:
        fmt = detect_format(data)
        try:
            samples, sample_rate = sf.read(io.BytesIO(data), dtype="float32", always_2d=True)
        except (RuntimeError, ValueError) as e:
            diagnostic = str(e)
            if any(marker in diagnostic.lower() for marker in _UNSUPPORTED_MARKERS):
                raise UnsupportedEncodingError(
                    f"libsndfile cannot read {fmt.value}",
                    diagnostic=diagnostic,
                    format=fmt.value,
                ) from e
            raise DecodeError(
                f"Corrupt or truncated {fmt.value} stream",
                diagnostic=diagnostic,
                format=fmt.value,
            ) from e

        if samples.shape[1] == 0:
            raise DecodeError(f"{fmt.value} stream has no channels", format=fmt.value)

        logger.debug(
            f"Decoded {fmt.value} via libsndfile: {samples.shape[0]} frames, "
            f"{samples.shape[1]}ch, {sample_rate} Hz"
        )
        return self._to_buffer(np.clip(samples, -1.0, 1.0), int(sample_rate), fmt)
