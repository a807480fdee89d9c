"""
PCM WAV Decoder - numpy reader for linear PCM and float WAV files.

Handles the common recorder output (8/16/24/32-bit integer PCM and
32/64-bit IEEE float, plain or WAVE_FORMAT_EXTENSIBLE) without going
through libsndfile. Other WAV codecs raise UnsupportedEncodingError and
fall through to the soundfile decoder.
"""

from __future__ import annotations

import logging

from clip_concat.decoders.base import BaseDecoder
from clip_concat.formats.detect import AudioFormat
from clip_concat.formats.wav import parse_wav, pcm_to_float
from clip_concat.types import DecodedBuffer

logger = logging.getLogger(__name__)


class PcmWavDecoder(BaseDecoder):
    """Decoder for linear PCM WAV streams."""

    @property
    def name(self) -> str:
        return "wav"

    @property
    def formats(self) -> frozenset[AudioFormat]:
        return frozenset({AudioFormat.WAV})

    def decode(self, data: bytes) -> DecodedBuffer:
        stream = parse_wav(data)
        samples = pcm_to_float(stream)
        logger.debug(
            f"Decoded WAV: {stream.frame_count} frames, {stream.channels}ch, "
            f"{stream.sample_rate} Hz, {stream.bits_per_sample}-bit"
        )
        return self._to_buffer(samples, stream.sample_rate, AudioFormat.WAV)
