"""
FFmpeg Decoder - pydub/ffmpeg-backed decoding.

Handles the containers libsndfile cannot open: AAC in MP4/M4A, raw ADTS
AAC and WebM/Matroska (typically Opus from browser recorders). Also acts
as the fallback for MP3 and Ogg when the installed libsndfile is too old.

Requires the ffmpeg binary on PATH.
"""

from __future__ import annotations

import io
import logging

import numpy as np
from pydub import AudioSegment
from pydub.exceptions import CouldntDecodeError

from clip_concat.decoders.base import BaseDecoder
from clip_concat.errors import DecodeError, UnsupportedEncodingError
from clip_concat.formats.detect import AudioFormat, detect_format
from clip_concat.types import DecodedBuffer

logger = logging.getLogger(__name__)

# ffmpeg demuxer names passed to pydub
_FORMAT_HINTS = {
    AudioFormat.MP4: "mp4",
    AudioFormat.AAC: "aac",
    AudioFormat.WEBM: "webm",
    AudioFormat.MP3: "mp3",
    AudioFormat.OGG_OPUS: "ogg",
    AudioFormat.OGG_VORBIS: "ogg",
    AudioFormat.OGG: "ogg",
}


def segment_to_array(segment: AudioSegment) -> np.ndarray:
    """
    Convert a pydub AudioSegment to float32 samples in [-1, 1].

    Returns:
        Array of shape (frames, channels)
    """
    full_scale = float(1 << (8 * segment.sample_width - 1))
    samples = np.array(segment.get_array_of_samples(), dtype=np.float64) / full_scale
    return np.clip(samples, -1.0, 1.0).astype(np.float32).reshape(-1, segment.channels)


class FfmpegDecoder(BaseDecoder):
    """Decoder that shells out to ffmpeg through pydub."""

    @property
    def name(self) -> str:
        return "ffmpeg"

    @property
    def formats(self) -> frozenset[AudioFormat]:
        return frozenset(_FORMAT_HINTS)

    def decode(self, data: bytes) -> DecodedBuffer:
        fmt = detect_format(data)
        try:
            segment = AudioSegment.from_file(io.BytesIO(data), format=_FORMAT_HINTS.get(fmt))
        except CouldntDecodeError as e:
            raise DecodeError(
                f"ffmpeg could not decode {fmt.value} stream",
                diagnostic=str(e).strip().splitlines()[-1] if str(e).strip() else None,
                format=fmt.value,
            ) from e
        except FileNotFoundError as e:
            raise UnsupportedEncodingError(
                f"Decoding {fmt.value} requires the ffmpeg binary",
                diagnostic=str(e),
                format=fmt.value,
            ) from e

        samples = segment_to_array(segment)
        logger.debug(
            f"Decoded {fmt.value} via ffmpeg: {samples.shape[0]} frames, "
            f"{segment.channels}ch, {segment.frame_rate} Hz"
        )
        return self._to_buffer(samples, segment.frame_rate, fmt)
