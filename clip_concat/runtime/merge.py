"""
Merger - Normalize decoded clips and concatenate them.

Policies:
    Sample rate   - the first clip's rate is the target; every other clip
                    is resampled to it with the injected Resampler.
    Channel count - the widest clip sets the count; narrower clips fill
                    each missing channel with a copy of their channel 0.
    Concatenation - clips are joined back to back in input order with no
                    gap, padding, or cross-fade.
"""

from __future__ import annotations

import logging
from typing import Sequence

import numpy as np

from clip_concat.errors import EmptyInputError, InvariantViolation
from clip_concat.formats.sample_rate import Resampler, SampleRateConverter, resampled_length
from clip_concat.types import DecodedBuffer, MergedAudio

logger = logging.getLogger(__name__)


class Merger:
    """Concatenates DecodedBuffers into one MergedAudio.

    Example:
        merger = Merger(SampleRateConverter(ResamplingQuality.MEDIUM))
        merged = merger.merge([intro, verse, outro])
        assert merged.frame_count == sum(...)
    """

    def __init__(self, resampler: Resampler | None = None):
        """Initialize merger.

        Args:
            resampler: Rate converter for clips whose rate differs from
                the first clip's (default: linear interpolation)
        """
        self.resampler = resampler or SampleRateConverter()

    def target_format(self, buffers: Sequence[DecodedBuffer]) -> tuple[int, int]:
        """Return (sample_rate, channel_count) of the merged output."""
        if not buffers:
            raise EmptyInputError("Nothing to merge")
        return buffers[0].sample_rate, max(b.channel_count for b in buffers)

    def _frames_at(self, buffer: DecodedBuffer, sample_rate: int) -> int:
        if buffer.sample_rate == sample_rate:
            return buffer.frame_count
        return resampled_length(buffer.frame_count, buffer.sample_rate, sample_rate)

    def _channel_at(self, buffer: DecodedBuffer, index: int, sample_rate: int) -> np.ndarray:
        samples = buffer.channels[index]
        if buffer.sample_rate == sample_rate:
            return samples
        return self.resampler.resample(samples, buffer.sample_rate, sample_rate)

    def merge(self, buffers: Sequence[DecodedBuffer]) -> MergedAudio:
        """
        Merge buffers in order.

        Args:
            buffers: Decoded clips in clip order (at least one)

        Returns:
            MergedAudio at the first clip's rate with the widest clip's
            channel count

        Raises:
            EmptyInputError: If buffers is empty
        """
        sample_rate, channel_count = self.target_format(buffers)
        total = sum(self._frames_at(b, sample_rate) for b in buffers)

        merged = [np.empty(total, dtype=np.float32) for _ in range(channel_count)]

        offset = 0
        for position, buf in enumerate(buffers):
            frames = self._frames_at(buf, sample_rate)
            if buf.sample_rate != sample_rate:
                logger.debug(f"Resampling clip {position}: {buf.sample_rate} -> {sample_rate} Hz")

            # Resample each source channel once, even when it is duplicated
            converted = [self._channel_at(buf, ch, sample_rate) for ch in range(buf.channel_count)]
            if any(len(samples) != frames for samples in converted):
                raise InvariantViolation(
                    "resampled_length",
                    f"Resampler returned {len(converted[0])} frames for clip {position}, expected {frames}",
                )
            for ch in range(channel_count):
                # Fewer channels than the target: duplicate channel 0
                src = ch if ch < buf.channel_count else 0
                merged[ch][offset:offset + frames] = converted[src]
            offset += frames

        logger.debug(
            f"Merged {len(buffers)} clips: {total} frames, {channel_count}ch, {sample_rate} Hz"
        )
        return MergedAudio(sample_rate=sample_rate, channels=merged)


def merge_buffers(
    buffers: Sequence[DecodedBuffer],
    resampler: Resampler | None = None,
) -> MergedAudio:
    """Convenience function: merge buffers with a fresh Merger."""
    return Merger(resampler).merge(buffers)
