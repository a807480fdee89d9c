"""
Concatenation Errors - Domain-specific error types.

Error hierarchy:
    ConcatError (base)
    ├── EmptyInputError
    ├── ClipLimitExceeded
    ├── ExportCancelled
    ├── InvariantViolation (internal defect, never expected)
    └── ClipError
        ├── ResolveError
        └── DecodeError
            └── UnsupportedEncodingError

Every error aborts the whole export. There is no partial output.
"""

from __future__ import annotations

from typing import Any


class ConcatError(Exception):
    """Base error for all concatenation failures."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class EmptyInputError(ConcatError):
    """
    Raised when the clip order yields no usable audio.

    Raised before any I/O when the clip order is empty or only holds
    blank references, and after decoding when every clip decoded to
    zero frames.
    """

    def __init__(self, message: str = "No audio files to concatenate", details: dict[str, Any] | None = None):
        super().__init__(message, details)


class ClipLimitExceeded(ConcatError):
    """Raised when an export holds more clips than the configured maximum."""

    def __init__(self, count: int, limit: int):
        super().__init__(
            f"Maximum {limit} audio segments allowed (got {count})",
            {"count": count, "limit": limit},
        )
        self.count = count
        self.limit = limit


class ExportCancelled(ConcatError):
    """Raised when a CancellationToken is triggered between clips."""

    def __init__(self, completed: int = 0, total: int = 0):
        super().__init__(
            f"Export cancelled after {completed}/{total} clips",
            {"completed": completed, "total": total},
        )
        self.completed = completed
        self.total = total


class InvariantViolation(ConcatError):
    """
    Raised when internal data breaks a structural invariant.

    Valid inputs never produce this. It signals a defect (for example
    channel arrays of different lengths reaching the encoder) and must
    not be caught and repaired.
    """

    def __init__(self, invariant: str, message: str, details: dict[str, Any] | None = None):
        super().__init__(f"[{invariant}] {message}", details)
        self.invariant = invariant


class ClipError(ConcatError):
    """Base for failures tied to one clip of the clip order.

    Attributes:
        index: Position of the clip in the caller's clip order (None when
            raised outside a pipeline run, e.g. by a bare decode() call).
        reference: The clip reference that failed.
    """

    def __init__(
        self,
        message: str,
        index: int | None = None,
        reference: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, details)
        self.index = index
        self.reference = reference

    def __str__(self) -> str:
        if self.index is None:
            return self.message
        return f"Clip {self.index} ({self.reference!r}): {self.message}"


class ResolveError(ClipError):
    """
    Raised when a clip reference cannot be turned into bytes.

    Examples:
    - Local file missing or unreadable
    - HTTP download returned a non-2xx status
    - Malformed data URL
    """

    def __init__(
        self,
        message: str,
        index: int | None = None,
        reference: str | None = None,
        status: int | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, index, reference, details)
        self.status = status

    def for_clip(self, index: int, reference: str) -> "ResolveError":
        """Return a copy of this error bound to a clip position."""
        return ResolveError(self.message, index, reference, self.status, self.details)


class DecodeError(ClipError):
    """
    Raised when bytes cannot be decoded as any supported encoding.

    Attributes:
        diagnostic: Underlying decoder message, where available.
        format: Sniffed container format name, where known.
    """

    def __init__(
        self,
        message: str,
        index: int | None = None,
        reference: str | None = None,
        diagnostic: str | None = None,
        format: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, index, reference, details)
        self.diagnostic = diagnostic
        self.format = format

    def for_clip(self, index: int, reference: str) -> "DecodeError":
        """Return a copy of this error bound to a clip position."""
        return type(self)(
            self.message,
            index,
            reference,
            diagnostic=self.diagnostic,
            format=self.format,
            details=self.details,
        )


class UnsupportedEncodingError(DecodeError):
    """
    Raised by a decoder that recognises the container but not the codec.

    The decoder registry treats this as "try the next decoder" rather
    than a final verdict on the stream.
    """
