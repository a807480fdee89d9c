"""
Export configuration for the concatenation engine.

The engine reads no environment variables; callers build a ConcatConfig
(or use the defaults) and pass it to the pipeline.
"""

from __future__ import annotations

from dataclasses import dataclass

from clip_concat.formats.sample_rate import ResamplingQuality, SampleRateConverter


@dataclass
class ConcatConfig:
    """Configuration for one or more export runs.

    Args:
        resampling: Quality of the rate conversion applied to clips whose
            sample rate differs from the first clip's.
        prefetch_workers: How many clips may be resolved concurrently.
            1 resolves strictly one clip at a time. Decoding and merging
            always happen in clip order regardless.
        max_clips: Reject exports with more clips than this before any
            I/O. None means unlimited.

    Example:
        config = ConcatConfig(
            resampling=ResamplingQuality.HIGH,
            prefetch_workers=4,
            max_clips=100,
        )
    """

    resampling: ResamplingQuality = ResamplingQuality.FAST
    """Resampler quality used by the merger."""

    prefetch_workers: int = 1
    """Resolve concurrency. Downloads are I/O bound; decoding stays sequential."""

    max_clips: int | None = None
    """Upper bound on the number of clips per export."""

    def __post_init__(self) -> None:
        """Validate configuration."""
        if isinstance(self.resampling, str):
            self.resampling = ResamplingQuality(self.resampling)
        if self.prefetch_workers < 1:
            raise ValueError("prefetch_workers must be >= 1")
        if self.max_clips is not None and self.max_clips < 1:
            raise ValueError("max_clips must be >= 1 or None")

    @property
    def sequential(self) -> bool:
        return self.prefetch_workers == 1

    def create_resampler(self) -> SampleRateConverter:
        """Build the resampler described by this config."""
        return SampleRateConverter(quality=self.resampling)
