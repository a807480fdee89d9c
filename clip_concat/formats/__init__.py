"""
Audio format handling for the concatenation engine.

Provides:
- Container sniffing from payload bytes
- Sample rate conversion
- WAV reading and 16-bit PCM WAV writing

Example:
    from clip_concat.formats import detect_format, convert_sample_rate, encode_wav

    fmt = detect_format(payload)
    audio_48k = convert_sample_rate(audio, 22050, 48000)
    wav_bytes = encode_wav(merged)
"""

from clip_concat.formats.detect import (
    AudioFormat,
    detect_format,
)
from clip_concat.formats.sample_rate import (
    convert_sample_rate,
    resampled_length,
    Resampler,
    SampleRateConverter,
    ResamplingQuality,
)
from clip_concat.formats.wav import (
    WAV_HEADER_SIZE,
    WavStream,
    encode_wav,
    parse_wav,
    pcm_to_float,
    quantize_pcm16,
)

__all__ = [
    # Detection
    "AudioFormat",
    "detect_format",
    # Sample Rate
    "convert_sample_rate",
    "resampled_length",
    "Resampler",
    "SampleRateConverter",
    "ResamplingQuality",
    # WAV
    "WAV_HEADER_SIZE",
    "WavStream",
    "encode_wav",
    "parse_wav",
    "pcm_to_float",
    "quantize_pcm16",
]
