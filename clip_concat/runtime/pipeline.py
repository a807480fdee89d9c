"""
Concatenation Pipeline - resolve → decode → merge → encode.

One run turns an ordered clip list into a single WAV file:

    for each clip, in order:
        emit (downloading, i+1, N)  →  resolve
        emit (decoding, i+1, N)     →  decode
    merge all decoded clips
    emit (encoding, 0, 1)  →  encode  →  emit (encoding, 1, 1)

Any failure aborts the run. There is no partial or best-effort output:
an export with a clip silently missing would look complete.

Usage:
    from clip_concat import concatenate, default_resolver

    wav = concatenate(
        ["intro.wav", "https://cdn.example.org/take-2.webm"],
        default_resolver(base_dir="recordings"),
        on_progress=lambda e: print(e.phase.value, e.current, e.total),
    )
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import threading
import time
from enum import Enum
from typing import Sequence

from clip_concat.config import ConcatConfig
from clip_concat.decoders.registry import DecoderRegistry, default_registry
from clip_concat.errors import (
    ClipLimitExceeded,
    ConcatError,
    DecodeError,
    EmptyInputError,
    ExportCancelled,
    ResolveError,
)
from clip_concat.formats.wav import encode_wav
from clip_concat.monitoring.logging import StructuredLogger, get_logger
from clip_concat.runtime.merge import Merger
from clip_concat.sources.clips import prepare_clips
from clip_concat.types import (
    Clip,
    DecodedBuffer,
    Phase,
    ProgressCallback,
    ProgressEvent,
    ResolveFn,
)


class PipelineState(Enum):
    """Lifecycle of one export run."""

    IDLE = "idle"
    DOWNLOADING = "downloading"
    DECODING = "decoding"
    MERGING = "merging"
    ENCODING = "encoding"
    DONE = "done"
    FAILED = "failed"
    CANCELLED = "cancelled"

    @property
    def terminal(self) -> bool:
        return self in (PipelineState.DONE, PipelineState.FAILED, PipelineState.CANCELLED)


class CancellationToken:
    """Cooperative cancellation flag shared between caller and pipeline.

    The pipeline checks it before every resolve and every decode. A clip
    that is already being decoded finishes first.
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


class ConcatPipeline:
    """Runs exports against one resolver.

    The pipeline object can be reused for sequential runs; each run owns
    its decoded buffers. `state` reflects the most recent run.

    Example:
        pipeline = ConcatPipeline(resolver, config=ConcatConfig(prefetch_workers=4))
        wav = pipeline.run(clip_order, on_progress=report)
    """

    def __init__(
        self,
        resolver: ResolveFn,
        *,
        registry: DecoderRegistry | None = None,
        merger: Merger | None = None,
        config: ConcatConfig | None = None,
        logger: StructuredLogger | None = None,
    ):
        """Initialize the pipeline.

        Args:
            resolver: Callable mapping a clip reference to bytes
            registry: Decoder registry (default: process-wide registry)
            merger: Merger (default: built from config.resampling)
            config: Export configuration
            logger: Structured logger (default: global logger)
        """
        self.resolver = resolver
        self.config = config or ConcatConfig()
        self.registry = registry or default_registry()
        self.merger = merger or Merger(self.config.create_resampler())
        self.logger = logger or get_logger()
        self.state = PipelineState.IDLE

    # -- helpers -----------------------------------------------------------

    @staticmethod
    def _emit(on_progress: ProgressCallback | None, phase: Phase, current: int, total: int) -> None:
        if on_progress is not None:
            on_progress(ProgressEvent(phase=phase, current=current, total=total))

    def _check_cancelled(self, token: CancellationToken | None, completed: int, total: int) -> None:
        if token is not None and token.cancelled:
            raise ExportCancelled(completed=completed, total=total)

    def _resolve(self, clip: Clip) -> bytes:
        try:
            data = self.resolver(clip.reference)
        except ResolveError as e:
            raise e.for_clip(clip.index, clip.reference) from e
        except Exception as e:
            raise ResolveError(str(e) or type(e).__name__, clip.index, clip.reference) from e

        if not isinstance(data, (bytes, bytearray, memoryview)):
            raise ResolveError(
                f"Resolver returned {type(data).__name__}, expected bytes",
                clip.index,
                clip.reference,
            )
        return bytes(data)

    def _decode(self, clip: Clip, data: bytes) -> DecodedBuffer:
        try:
            return self.registry.decode(data)
        except DecodeError as e:
            raise e.for_clip(clip.index, clip.reference) from e

    def _validate(self, clips: list[Clip], raw_count: int) -> None:
        if not clips:
            detail = "empty clip order" if raw_count == 0 else "all references are blank"
            raise EmptyInputError(details={"reason": detail, "references": raw_count})
        if self.config.max_clips is not None and len(clips) > self.config.max_clips:
            raise ClipLimitExceeded(len(clips), self.config.max_clips)

    # -- run ---------------------------------------------------------------

    def run(
        self,
        clip_order: Sequence[str],
        on_progress: ProgressCallback | None = None,
        cancel_token: CancellationToken | None = None,
    ) -> bytes:
        """
        Concatenate clips into one WAV file.

        Args:
            clip_order: Clip references in concatenation order
            on_progress: Called synchronously with each ProgressEvent
            cancel_token: Checked before every resolve and decode

        Returns:
            16-bit PCM WAV bytes

        Raises:
            EmptyInputError: No non-blank references, or only empty audio
            ClipLimitExceeded: More clips than config.max_clips
            ResolveError: A clip could not be fetched (index/reference set)
            DecodeError: A clip could not be decoded (index/reference set)
            ExportCancelled: The token was cancelled between clips
        """
        self.state = PipelineState.IDLE
        clips = prepare_clips(clip_order)
        total = len(clips)
        log = self.logger.bind(clips=total)

        decoded: list[DecodedBuffer] = []
        start = time.perf_counter()

        try:
            self._validate(clips, len(clip_order))
            log.export_start(total)

            if self.config.sequential:
                self._run_sequential(clips, decoded, on_progress, cancel_token, log)
            else:
                self._run_prefetching(clips, decoded, on_progress, cancel_token, log)

            if sum(b.frame_count for b in decoded) == 0:
                raise EmptyInputError(
                    "Every clip decoded to zero frames",
                    details={"references": total},
                )

            self.state = PipelineState.MERGING
            merged = self.merger.merge(decoded)
            decoded.clear()

            self.state = PipelineState.ENCODING
            self._emit(on_progress, Phase.ENCODING, 0, 1)
            wav = encode_wav(merged)
            self._emit(on_progress, Phase.ENCODING, 1, 1)

        except ExportCancelled as e:
            self.state = PipelineState.CANCELLED
            log.export_cancelled(e.completed, e.total)
            raise
        except ConcatError as e:
            self.state = PipelineState.FAILED
            log.export_error(e)
            raise
        except BaseException:
            self.state = PipelineState.FAILED
            raise
        finally:
            # Release whatever was decoded before a failure
            decoded.clear()

        self.state = PipelineState.DONE
        log.export_complete(
            duration_ms=(time.perf_counter() - start) * 1000,
            frames=merged.frame_count,
            channels=merged.channel_count,
            sample_rate=merged.sample_rate,
            size_bytes=len(wav),
        )
        return wav

    def _decode_step(
        self,
        clip: Clip,
        position: int,
        total: int,
        data: bytes,
        decoded: list[DecodedBuffer],
        on_progress: ProgressCallback | None,
        cancel_token: CancellationToken | None,
        log: StructuredLogger,
    ) -> None:
        log.clip_resolved(clip.index, clip.reference, len(data))

        self._check_cancelled(cancel_token, position, total)
        self.state = PipelineState.DECODING
        self._emit(on_progress, Phase.DECODING, position + 1, total)

        if not data:
            # Zero bytes is a silent clip, not a corrupt one
            log.clip_empty(clip.index, clip.reference)
            return

        buffer = self._decode(clip, data)
        decoded.append(buffer)
        log.clip_decoded(
            clip.index,
            buffer.source_format,
            buffer.sample_rate,
            buffer.channel_count,
            buffer.frame_count,
        )

    def _run_sequential(
        self,
        clips: list[Clip],
        decoded: list[DecodedBuffer],
        on_progress: ProgressCallback | None,
        cancel_token: CancellationToken | None,
        log: StructuredLogger,
    ) -> None:
        total = len(clips)
        for position, clip in enumerate(clips):
            self._check_cancelled(cancel_token, position, total)
            self.state = PipelineState.DOWNLOADING
            self._emit(on_progress, Phase.DOWNLOADING, position + 1, total)

            data = self._resolve(clip)
            self._decode_step(clip, position, total, data, decoded, on_progress, cancel_token, log)

    def _run_prefetching(
        self,
        clips: list[Clip],
        decoded: list[DecodedBuffer],
        on_progress: ProgressCallback | None,
        cancel_token: CancellationToken | None,
        log: StructuredLogger,
    ) -> None:
        """Resolve up to prefetch_workers clips ahead; decode in clip order."""
        total = len(clips)
        window = self.config.prefetch_workers
        pending: dict[int, concurrent.futures.Future[bytes]] = {}

        executor = concurrent.futures.ThreadPoolExecutor(
            max_workers=window,
            thread_name_prefix="clip-prefetch",
        )
        try:
            submitted = 0
            for position, clip in enumerate(clips):
                self._check_cancelled(cancel_token, position, total)

                while submitted < total and submitted < position + window:
                    pending[submitted] = executor.submit(self._resolve, clips[submitted])
                    submitted += 1

                self.state = PipelineState.DOWNLOADING
                self._emit(on_progress, Phase.DOWNLOADING, position + 1, total)

                data = pending.pop(position).result()
                self._decode_step(clip, position, total, data, decoded, on_progress, cancel_token, log)
        finally:
            for future in pending.values():
                future.cancel()
            executor.shutdown(wait=True)


def concatenate(
    clip_order: Sequence[str],
    resolver: ResolveFn,
    on_progress: ProgressCallback | None = None,
    *,
    cancel_token: CancellationToken | None = None,
    config: ConcatConfig | None = None,
    registry: DecoderRegistry | None = None,
    logger: StructuredLogger | None = None,
) -> bytes:
    """Concatenate clips into one 16-bit PCM WAV file.

    Convenience function that builds a ConcatPipeline for a single run.

    Args:
        clip_order: Clip references in concatenation order
        resolver: Callable mapping a reference to its bytes
        on_progress: Called with each ProgressEvent
        cancel_token: Optional cooperative cancellation token
        config: Export configuration
        registry: Decoder registry override
        logger: Structured logger override

    Returns:
        WAV bytes (content type audio/wav)

    Example:
        wav = concatenate(paths, FileResolver("recordings"))
        Path("chapter.wav").write_bytes(wav)
    """
    pipeline = ConcatPipeline(resolver, registry=registry, config=config, logger=logger)
    return pipeline.run(clip_order, on_progress=on_progress, cancel_token=cancel_token)


async def concatenate_async(
    clip_order: Sequence[str],
    resolver: ResolveFn,
    on_progress: ProgressCallback | None = None,
    *,
    cancel_token: CancellationToken | None = None,
    config: ConcatConfig | None = None,
    registry: DecoderRegistry | None = None,
    logger: StructuredLogger | None = None,
) -> bytes:
    """Awaitable concatenate(); the run happens in a worker thread.

    Progress callbacks are invoked from that worker thread.
    """
    return await asyncio.to_thread(
        concatenate,
        list(clip_order),
        resolver,
        on_progress,
        cancel_token=cancel_token,
        config=config,
        registry=registry,
        logger=logger,
    )
