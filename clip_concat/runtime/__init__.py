"""
Runtime - merging and the export pipeline.
"""

from clip_concat.runtime.merge import Merger, merge_buffers
from clip_concat.runtime.pipeline import (
    CancellationToken,
    ConcatPipeline,
    PipelineState,
    concatenate,
    concatenate_async,
)

__all__ = [
    "Merger",
    "merge_buffers",
    "CancellationToken",
    "ConcatPipeline",
    "PipelineState",
    "concatenate",
    "concatenate_async",
]
