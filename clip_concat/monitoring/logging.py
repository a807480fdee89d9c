"""
Structured logging for export runs.

Every record is one JSON object per line:

    {"ts": 1700000000.1, "level": "info", "event": "export_start",
     "message": "Concatenating 3 clips", "clips": 3}
"""

from __future__ import annotations

import json
import logging
import sys
import threading
import time
from enum import IntEnum
from typing import Any, TextIO


class LogLevel(IntEnum):
    """Minimum severity a StructuredLogger writes. Values follow `logging`."""

    DEBUG = logging.DEBUG
    INFO = logging.INFO
    WARNING = logging.WARNING
    ERROR = logging.ERROR

    @classmethod
    def parse(cls, value: "LogLevel | str") -> "LogLevel":
        if isinstance(value, cls):
            return value
        return cls[str(value).upper()]


class StructuredLogger:
    """JSON-lines logger for export events.

    Loggers are cheap; `bind()` returns a child that shares the output
    stream and lock and adds fields to every record it writes.

    Example:
        log = StructuredLogger(level=LogLevel.DEBUG).bind(clips=12)
        log.export_start(12)
    """

    def __init__(
        self,
        name: str = "clip_concat",
        level: LogLevel | str = LogLevel.INFO,
        output: TextIO | None = None,
    ):
        self.name = name
        self.level = LogLevel.parse(level)
        self._output = output or sys.stderr
        self._context: dict[str, Any] = {}
        self._lock = threading.Lock()

    @property
    def context(self) -> dict[str, Any]:
        return dict(self._context)

    def bind(self, **context: Any) -> "StructuredLogger":
        child = StructuredLogger(self.name, self.level, self._output)
        child._context = {**self._context, **context}
        child._lock = self._lock
        return child

    def _log(self, level: LogLevel, event: str, message: str, fields: dict[str, Any]) -> None:
        if level < self.level:
            return
        record = {
            "ts": time.time(),
            "level": level.name.lower(),
            "event": event,
            "message": message,
            **self._context,
            **fields,
        }
        line = json.dumps(record, default=str)
        with self._lock:
            print(line, file=self._output)

    def debug(self, event: str, message: str = "", **fields: Any) -> None:
        self._log(LogLevel.DEBUG, event, message, fields)

    def info(self, event: str, message: str = "", **fields: Any) -> None:
        self._log(LogLevel.INFO, event, message, fields)

    def warning(self, event: str, message: str = "", **fields: Any) -> None:
        self._log(LogLevel.WARNING, event, message, fields)

    def error(self, event: str, message: str = "", **fields: Any) -> None:
        self._log(LogLevel.ERROR, event, message, fields)

    # Export events

    def export_start(self, clips: int) -> None:
        self.info("export_start", f"Concatenating {clips} clips", clips=clips)

    def clip_resolved(self, index: int, reference: str, size_bytes: int) -> None:
        self.debug("clip_resolved", index=index, reference=reference, size_bytes=size_bytes)

    def clip_empty(self, index: int, reference: str) -> None:
        self.debug("clip_empty", "Zero-byte clip contributes no frames", index=index, reference=reference)

    def clip_decoded(self, index: int, format: str, sample_rate: int, channels: int, frames: int) -> None:
        self.debug(
            "clip_decoded",
            index=index,
            format=format,
            sample_rate=sample_rate,
            channels=channels,
            frames=frames,
        )

    def export_complete(
        self,
        duration_ms: float,
        frames: int,
        channels: int,
        sample_rate: int,
        size_bytes: int,
    ) -> None:
        self.info(
            "export_complete",
            f"Export completed in {duration_ms:.1f}ms",
            duration_ms=duration_ms,
            frames=frames,
            channels=channels,
            sample_rate=sample_rate,
            size_bytes=size_bytes,
        )

    def export_error(self, error: Exception) -> None:
        """Log a failed run; clip errors add the failing index and reference."""
        fields = {"error_type": type(error).__name__}
        for key in ("index", "reference"):
            value = getattr(error, key, None)
            if value is not None:
                fields[key] = value
        self.error("export_error", str(error), **fields)

    def export_cancelled(self, completed: int, total: int) -> None:
        self.warning(
            "export_cancelled",
            f"Cancelled after {completed}/{total} clips",
            completed=completed,
            total=total,
        )


_global_logger: StructuredLogger | None = None


def configure_logging(
    level: LogLevel | str = LogLevel.INFO,
    output: TextIO | None = None,
) -> StructuredLogger:
    """Replace the logger pipelines use when none is passed in."""
    global _global_logger
    _global_logger = StructuredLogger(level=level, output=output)
    return _global_logger


def get_logger() -> StructuredLogger:
    global _global_logger
    if _global_logger is None:
        _global_logger = StructuredLogger()
    return _global_logger
