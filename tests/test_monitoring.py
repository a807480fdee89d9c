"""
Tests for structured logging.
"""

import io
import json
import logging
from pathlib import Path

import pytest

from clip_concat.errors import DecodeError
from clip_concat.monitoring import LogLevel, StructuredLogger, configure_logging, get_logger


@pytest.fixture
def stream():
    return io.StringIO()


def records(stream) -> list[dict]:
    return [json.loads(line) for line in stream.getvalue().splitlines()]


class TestStructuredLogger:
    """Tests for StructuredLogger."""

    def test_json_output(self, stream):
        logger = StructuredLogger("test", output=stream)
        logger.info("export_start", "Starting", clips=3)

        (record,) = records(stream)
        assert record["event"] == "export_start"
        assert record["message"] == "Starting"
        assert record["level"] == "info"
        assert record["clips"] == 3
        assert isinstance(record["ts"], float)

    def test_level_filtering(self, stream):
        logger = StructuredLogger("test", level=LogLevel.WARNING, output=stream)

        logger.debug("hidden")
        logger.info("hidden")
        logger.warning("shown")
        logger.error("shown")

        assert [r["event"] for r in records(stream)] == ["shown", "shown"]

    def test_bind(self, stream):
        logger = StructuredLogger("test", output=stream)
        bound = logger.bind(run_id="r1")

        bound.info("event", extra=1)
        logger.info("event")

        first, second = records(stream)
        assert first["run_id"] == "r1"
        assert first["extra"] == 1
        assert "run_id" not in second
        assert bound.context == {"run_id": "r1"}
        assert logger.context == {}

    def test_bound_children_share_stream(self, stream):
        logger = StructuredLogger("test", output=stream)
        logger.bind(a=1).bind(b=2).warning("export_cancelled", completed=1)

        (record,) = records(stream)
        assert record["a"] == 1
        assert record["b"] == 2
        assert record["level"] == "warning"

    def test_export_error_carries_clip(self, stream):
        logger = StructuredLogger("test", output=stream)
        logger.export_error(DecodeError("bad header", index=4, reference="x.wav"))

        (record,) = records(stream)
        assert record["index"] == 4
        assert record["reference"] == "x.wav"
        assert record["error_type"] == "DecodeError"
        assert record["message"] == "Clip 4 ('x.wav'): bad header"

    def test_clip_events_are_debug(self, stream):
        logger = StructuredLogger("test", output=stream)
        logger.clip_resolved(0, "a.wav", 100)
        logger.clip_decoded(0, "wav", 24000, 1, 2400)

        assert records(stream) == []

    def test_non_serialisable_values(self, stream):
        logger = StructuredLogger("test", output=stream)
        logger.info("event", path=Path("clips/a.wav"))

        assert records(stream)[0]["path"] == str(Path("clips/a.wav"))

    def test_clip_empty_event(self, stream):
        logger = StructuredLogger("test", level="debug", output=stream)
        logger.clip_empty(2, "silence.wav")

        (record,) = records(stream)
        assert record["event"] == "clip_empty"
        assert record["index"] == 2
        assert record["level"] == "debug"


class TestLogLevel:
    """Tests for LogLevel enum."""

    def test_matches_stdlib_levels(self):
        assert LogLevel.DEBUG == logging.DEBUG
        assert LogLevel.ERROR == logging.ERROR
        assert LogLevel.DEBUG < LogLevel.INFO < LogLevel.WARNING < LogLevel.ERROR

    def test_parse(self):
        assert LogLevel.parse("warning") is LogLevel.WARNING
        assert LogLevel.parse(LogLevel.INFO) is LogLevel.INFO
        with pytest.raises(KeyError):
            LogLevel.parse("verbose")


class TestGlobalLogger:
    """Tests for configure_logging() / get_logger()."""

    def test_configure(self, stream):
        logger = configure_logging("debug", output=stream)

        try:
            assert logger.level == LogLevel.DEBUG
            assert get_logger() is logger
        finally:
            configure_logging()

