"""
Decoders - clip bytes to PCM.

Each decoder handles a family of containers; the registry sniffs the
payload and dispatches. Formats are never inferred from file names.
"""

from clip_concat.decoders.base import Decoder, BaseDecoder
from clip_concat.decoders.wav import PcmWavDecoder
from clip_concat.decoders.sndfile import SoundFileDecoder
from clip_concat.decoders.ffmpeg import FfmpegDecoder
from clip_concat.decoders.registry import (
    DecoderRegistry,
    decode,
    default_registry,
    load_registry,
)

__all__ = [
    "Decoder",
    "BaseDecoder",
    "PcmWavDecoder",
    "SoundFileDecoder",
    "FfmpegDecoder",
    "DecoderRegistry",
    "decode",
    "default_registry",
    "load_registry",
]
