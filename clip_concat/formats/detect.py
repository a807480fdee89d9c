"""
Container format detection.

Clip references are often bare storage paths with no extension, so the
encoding is always sniffed from the leading bytes of the payload.
"""

from __future__ import annotations

from enum import Enum


class AudioFormat(Enum):
    """Container/codec families the decoders recognise."""
    WAV = "wav"
    MP3 = "mp3"
    OGG_VORBIS = "ogg_vorbis"
    OGG_OPUS = "ogg_opus"
    OGG = "ogg"          # Ogg with another (or unidentified) codec
    FLAC = "flac"
    AIFF = "aiff"
    MP4 = "mp4"          # ISO-BMFF: m4a, mp4, 3gp (usually AAC)
    AAC = "aac"          # Raw AAC in ADTS frames
    WEBM = "webm"        # Matroska/WebM (usually Opus)
    UNKNOWN = "unknown"

    @property
    def mime_type(self) -> str:
        """Best-effort MIME type for the format."""
        return _MIME_TYPES.get(self, "application/octet-stream")


_MIME_TYPES = {
    AudioFormat.WAV: "audio/wav",
    AudioFormat.MP3: "audio/mpeg",
    AudioFormat.OGG_VORBIS: "audio/ogg",
    AudioFormat.OGG_OPUS: "audio/ogg",
    AudioFormat.OGG: "audio/ogg",
    AudioFormat.FLAC: "audio/flac",
    AudioFormat.AIFF: "audio/aiff",
    AudioFormat.MP4: "audio/mp4",
    AudioFormat.AAC: "audio/aac",
    AudioFormat.WEBM: "audio/webm",
}

# Bytes of the first Ogg page searched for the codec identification header
_OGG_HEADER_BYTES = 64

_EBML_MAGIC = b"\x1a\x45\xdf\xa3"


def _is_mpeg_audio_sync(data: bytes) -> bool:
    """MPEG audio frame sync with a non-reserved layer (MP1/2/3)."""
    return len(data) >= 2 and data[0] == 0xFF and (data[1] & 0xE0) == 0xE0 and (data[1] & 0x06) != 0


def _is_adts_sync(data: bytes) -> bool:
    """AAC ADTS sync: 12 set bits followed by layer bits 00."""
    return len(data) >= 2 and data[0] == 0xFF and (data[1] & 0xF6) == 0xF0


def detect_format(data: bytes) -> AudioFormat:
    """
    Detect audio format from the payload header.

    Args:
        data: Audio bytes (the first 64 bytes are enough)

    Returns:
        Detected AudioFormat, or AudioFormat.UNKNOWN if no signature matches
    """
    if len(data) < 4:
        return AudioFormat.UNKNOWN

    # WAV: "RIFF....WAVE"
    if data[:4] == b"RIFF" and data[8:12] == b"WAVE":
        return AudioFormat.WAV

    # OGG: "OggS", codec named in the first page's identification header
    if data[:4] == b"OggS":
        first_page = data[:_OGG_HEADER_BYTES]
        if b"OpusHead" in first_page:
            return AudioFormat.OGG_OPUS
        if b"\x01vorbis" in first_page:
            return AudioFormat.OGG_VORBIS
        return AudioFormat.OGG

    # FLAC: "fLaC"
    if data[:4] == b"fLaC":
        return AudioFormat.FLAC

    # AIFF / AIFF-C: "FORM....AIFF"
    if data[:4] == b"FORM" and data[8:12] in (b"AIFF", b"AIFC"):
        return AudioFormat.AIFF

    # WebM / Matroska: EBML header
    if data[:4] == _EBML_MAGIC:
        return AudioFormat.WEBM

    # MP4 family: box size then "ftyp"
    if data[4:8] == b"ftyp":
        return AudioFormat.MP4

    # MP3: ID3 tag or frame sync word
    if data[:3] == b"ID3" or _is_mpeg_audio_sync(data):
        return AudioFormat.MP3

    if _is_adts_sync(data):
        return AudioFormat.AAC

    return AudioFormat.UNKNOWN
