"""
clip-concat - Lossless concatenation of recorded audio clips.

Architecture:
    Resolver → Decoder → Merger → WAV Encoder

Public API (stable):
    concatenate        - Ordered clip references → 16-bit PCM WAV bytes
    concatenate_async  - Awaitable variant (runs in a worker thread)
    ConcatPipeline     - Reusable pipeline with state and cancellation
    ConcatConfig       - Resampling quality, prefetch, clip limit
    ProgressEvent      - (phase, current, total) progress updates

Components:
    sources     - Clip-order normalisation and resolvers (file, data URL, HTTP)
    decoders    - Format sniffing and per-container decoders
                  (numpy WAV, libsndfile, ffmpeg via pydub)
    formats     - Format detection, sample rate conversion, WAV I/O
    runtime     - Merger and pipeline
    export      - Download filename helpers
    monitoring  - Structured logging
    testing     - MockResolver, RecordingRegistry, test audio fixtures

Example:
    from clip_concat import concatenate, default_resolver, suggest_filename

    wav = concatenate(
        ["take-1.wav", "take-2.webm", "take-3.m4a"],
        default_resolver(base_dir="recordings"),
        on_progress=lambda e: print(f"{e.phase.value} {e.current}/{e.total}"),
    )

    name = suggest_filename("Genesis 1", "Ana Lima")
    Path(name).write_bytes(wav)
"""

from clip_concat.config import ConcatConfig
from clip_concat.errors import (
    ConcatError,
    EmptyInputError,
    ClipLimitExceeded,
    ExportCancelled,
    InvariantViolation,
    ClipError,
    ResolveError,
    DecodeError,
    UnsupportedEncodingError,
)
from clip_concat.types import (
    Clip,
    DecodedBuffer,
    MergedAudio,
    Phase,
    ProgressEvent,
)
from clip_concat.decoders import DecoderRegistry, decode
from clip_concat.formats import (
    AudioFormat,
    ResamplingQuality,
    SampleRateConverter,
    detect_format,
    encode_wav,
)
from clip_concat.runtime import (
    CancellationToken,
    ConcatPipeline,
    Merger,
    PipelineState,
    concatenate,
    concatenate_async,
    merge_buffers,
)
from clip_concat.sources import (
    build_clip_order,
    extract_audio_paths,
    DataUrlResolver,
    FileResolver,
    HttpResolver,
    SchemeResolver,
    default_resolver,
)
from clip_concat.export import WAV_CONTENT_TYPE, sanitize_name, suggest_filename

__version__ = "1.0.0"

__all__ = [
    # Entry points
    "concatenate",
    "concatenate_async",
    "ConcatPipeline",
    "PipelineState",
    "CancellationToken",
    "ConcatConfig",
    # Data
    "Clip",
    "DecodedBuffer",
    "MergedAudio",
    "Phase",
    "ProgressEvent",
    # Components
    "decode",
    "DecoderRegistry",
    "Merger",
    "merge_buffers",
    "encode_wav",
    "AudioFormat",
    "detect_format",
    "ResamplingQuality",
    "SampleRateConverter",
    # Sources
    "build_clip_order",
    "extract_audio_paths",
    "DataUrlResolver",
    "FileResolver",
    "HttpResolver",
    "SchemeResolver",
    "default_resolver",
    # Export
    "WAV_CONTENT_TYPE",
    "sanitize_name",
    "suggest_filename",
    # Errors
    "ConcatError",
    "EmptyInputError",
    "ClipLimitExceeded",
    "ExportCancelled",
    "InvariantViolation",
    "ClipError",
    "ResolveError",
    "DecodeError",
    "UnsupportedEncodingError",
]
