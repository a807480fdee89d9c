"""
RIFF/WAVE reading and writing.

Writing always produces the canonical 44-byte header followed by
interleaved 16-bit PCM. Reading handles the integer and float PCM
variants that show up in recorded clips; other codecs are left to the
libsndfile-backed decoder.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass

import numpy as np

from clip_concat.errors import DecodeError, InvariantViolation, UnsupportedEncodingError
from clip_concat.types import MergedAudio


WAV_HEADER_SIZE = 44
BITS_PER_SAMPLE = 16
BYTES_PER_SAMPLE = BITS_PER_SAMPLE // 8

WAVE_FORMAT_PCM = 0x0001
WAVE_FORMAT_IEEE_FLOAT = 0x0003
WAVE_FORMAT_EXTENSIBLE = 0xFFFE

# Size fields left unpatched by recorders that stream straight to disk
_UNPATCHED_SIZES = (0, 0xFFFFFFFF)

_MAX_RIFF_DATA = 0xFFFFFFFF - (WAV_HEADER_SIZE - 8)

_HEADER = struct.Struct("<4sI4s4sIHHIIHH4sI")


def quantize_pcm16(samples: np.ndarray) -> np.ndarray:
    """
    Quantize float samples to signed 16-bit integers.

    NaN becomes 0, samples are clamped to [-1, 1], negative values scale
    by 32768 and non-negative values by 32767, then truncate toward zero.
    -1.0 maps to -32768 and 1.0 to 32767.
    """
    x = np.nan_to_num(np.asarray(samples, dtype=np.float64), nan=0.0)
    x = np.clip(x, -1.0, 1.0)
    scaled = np.where(x < 0, x * 32768.0, x * 32767.0)
    return np.trunc(scaled).astype("<i2")


def _check_invariants(audio: MergedAudio) -> None:
    if audio.sample_rate <= 0:
        raise InvariantViolation("sample_rate", f"Sample rate must be positive, got {audio.sample_rate}")
    if not audio.channels:
        raise InvariantViolation("channel_count", "Merged audio has no channels")
    lengths = [len(ch) for ch in audio.channels]
    if len(set(lengths)) != 1:
        raise InvariantViolation(
            "channel_length",
            "Merged channel arrays differ in length",
            {"lengths": lengths},
        )


def encode_wav(audio: MergedAudio) -> bytes:
    """
    Serialize merged audio to a 16-bit PCM WAV file.

    Args:
        audio: Merged audio with equal-length channel arrays

    Returns:
        Complete WAV file bytes (44-byte header + interleaved samples)

    Raises:
        InvariantViolation: If channel arrays differ in length, there are
            no channels, or the data does not fit a RIFF container
    """
    _check_invariants(audio)

    channels = audio.channel_count
    frames = audio.frame_count
    block_align = channels * BYTES_PER_SAMPLE
    byte_rate = audio.sample_rate * block_align
    data_size = frames * block_align

    if data_size > _MAX_RIFF_DATA:
        raise InvariantViolation(
            "riff_size",
            f"{data_size} bytes of PCM exceed the 4 GiB RIFF limit",
        )

    header = _HEADER.pack(
        b"RIFF",
        36 + data_size,
        b"WAVE",
        b"fmt ",
        16,                 # PCM subchunk size
        WAVE_FORMAT_PCM,
        channels,
        audio.sample_rate,
        byte_rate,
        block_align,
        BITS_PER_SAMPLE,
        b"data",
        data_size,
    )

    # Frame-major, channel-minor
    pcm = np.stack([quantize_pcm16(ch) for ch in audio.channels], axis=1)
    return header + pcm.tobytes()


@dataclass
class WavStream:
    """
    Parsed WAV container.

    Attributes:
        format_tag: WAVE format code (subformat for WAVE_FORMAT_EXTENSIBLE)
        channels: Number of channels
        sample_rate: Sample rate in Hz
        bits_per_sample: Bits per sample
        block_align: Bytes per frame
        data: Raw sample payload (whole frames only)
    """
    format_tag: int
    channels: int
    sample_rate: int
    bits_per_sample: int
    block_align: int
    data: bytes

    @property
    def frame_count(self) -> int:
        return len(self.data) // self.block_align if self.block_align else 0


def _parse_fmt(chunk: bytes) -> tuple[int, int, int, int, int]:
    format_tag, channels, sample_rate, _byte_rate, block_align, bits = struct.unpack(
        "<HHIIHH", chunk[:16]
    )
    if format_tag == WAVE_FORMAT_EXTENSIBLE and len(chunk) >= 40:
        # First two bytes of the SubFormat GUID carry the real format code
        format_tag = struct.unpack("<H", chunk[24:26])[0]
    return format_tag, channels, sample_rate, block_align, bits


def _looks_like_chunk(data: bytes, offset: int) -> bool:
    """A printable four-character id followed by a size that fits the stream."""
    if offset + 8 > len(data):
        return False
    chunk_id = data[offset:offset + 4]
    if not all(0x20 <= b <= 0x7E for b in chunk_id):
        return False
    size = struct.unpack("<I", data[offset + 4:offset + 8])[0]
    return offset + 8 + size <= len(data)


def _data_is_open_ended(data: bytes, chunk_size: int, body: int) -> bool:
    """
    Whether a data chunk runs to the end of the stream regardless of its size.

    0xFFFFFFFF always does. 0 is also a genuine empty chunk, so it only
    counts as unpatched when the RIFF size is unpatched too or the bytes
    after it are not another chunk.
    """
    if chunk_size == 0xFFFFFFFF:
        return True
    if chunk_size != 0 or body >= len(data):
        return False
    riff_size = struct.unpack("<I", data[4:8])[0]
    if riff_size in _UNPATCHED_SIZES:
        return True
    return not _looks_like_chunk(data, body)


def parse_wav(data: bytes) -> WavStream:
    """
    Parse a RIFF/WAVE byte stream.

    Args:
        data: Complete WAV file bytes

    Returns:
        WavStream with format fields and the sample payload

    Raises:
        DecodeError: If the stream is not RIFF/WAVE, is truncated, or is
            missing its fmt/data chunks
    """
    if len(data) < 12 or data[:4] != b"RIFF" or data[8:12] != b"WAVE":
        raise DecodeError("Invalid WAV: missing RIFF/WAVE header", format="wav")

    fmt: tuple[int, int, int, int, int] | None = None
    payload: bytes | None = None
    open_ended = False

    offset = 12
    while offset + 8 <= len(data):
        chunk_id = data[offset:offset + 4]
        chunk_size = struct.unpack("<I", data[offset + 4:offset + 8])[0]
        body = offset + 8

        if chunk_id == b"fmt ":
            if chunk_size < 16 or body + chunk_size > len(data):
                raise DecodeError("Invalid WAV: truncated fmt chunk", format="wav")
            fmt = _parse_fmt(data[body:body + chunk_size])
        elif chunk_id == b"data":
            if _data_is_open_ended(data, chunk_size, body):
                payload = data[body:]
                open_ended = True
                break
            if body + chunk_size > len(data):
                raise DecodeError(
                    "Invalid WAV: truncated data chunk",
                    format="wav",
                    diagnostic=f"declared {chunk_size} bytes, {len(data) - body} available",
                )
            payload = data[body:body + chunk_size]
            if fmt is not None:
                break

        # Chunks are word aligned
        offset = body + chunk_size + (chunk_size & 1)

    if fmt is None:
        raise DecodeError("Invalid WAV: missing fmt chunk", format="wav")
    if payload is None:
        raise DecodeError("Invalid WAV: missing data chunk", format="wav")

    format_tag, channels, sample_rate, block_align, bits = fmt
    if channels < 1 or sample_rate < 1:
        raise DecodeError(
            f"Invalid WAV: {channels} channels at {sample_rate} Hz",
            format="wav",
        )
    if format_tag not in (WAVE_FORMAT_PCM, WAVE_FORMAT_IEEE_FLOAT):
        raise UnsupportedEncodingError(
            f"WAV format code 0x{format_tag:04x} is not linear PCM",
            format="wav",
        )
    if bits % 8 or block_align != channels * (bits // 8):
        raise UnsupportedEncodingError(
            f"Unsupported WAV layout: {bits} bits, block align {block_align}",
            format="wav",
        )

    remainder = len(payload) % block_align
    if remainder:
        if not open_ended:
            raise DecodeError("Invalid WAV: data ends mid-frame", format="wav")
        payload = payload[:len(payload) - remainder]

    return WavStream(
        format_tag=format_tag,
        channels=channels,
        sample_rate=sample_rate,
        bits_per_sample=bits,
        block_align=block_align,
        data=payload,
    )


def pcm_to_float(stream: WavStream) -> np.ndarray:
    """
    Convert a WavStream payload to float32 samples in [-1, 1].

    Returns:
        Array of shape (frames, channels)

    Raises:
        UnsupportedEncodingError: For bit depths this reader does not handle
    """
    bits = stream.bits_per_sample
    raw = stream.data

    if stream.format_tag == WAVE_FORMAT_IEEE_FLOAT:
        if bits == 32:
            audio = np.frombuffer(raw, dtype="<f4").astype(np.float32)
        elif bits == 64:
            audio = np.frombuffer(raw, dtype="<f8").astype(np.float32)
        else:
            raise UnsupportedEncodingError(f"Unsupported float bit depth: {bits}", format="wav")
        audio = np.clip(np.nan_to_num(audio, nan=0.0), -1.0, 1.0)
    elif bits == 8:
        audio = (np.frombuffer(raw, dtype=np.uint8).astype(np.float32) - 128.0) / 128.0
    elif bits == 16:
        audio = np.frombuffer(raw, dtype="<i2").astype(np.float32) / 32768.0
    elif bits == 24:
        b = np.frombuffer(raw, dtype=np.uint8).reshape(-1, 3).astype(np.int32)
        value = b[:, 0] | (b[:, 1] << 8) | (b[:, 2] << 16)
        value = (value ^ 0x800000) - 0x800000  # sign-extend
        audio = value.astype(np.float32) / 8388608.0
    elif bits == 32:
        audio = (np.frombuffer(raw, dtype="<i4").astype(np.float64) / 2147483648.0).astype(np.float32)
    else:
        raise UnsupportedEncodingError(f"Unsupported bit depth: {bits}", format="wav")

    return audio.reshape(-1, stream.channels)
