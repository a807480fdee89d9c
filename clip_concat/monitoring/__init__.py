"""
Monitoring for export runs.

Components:
    StructuredLogger - JSON-lines export event logging

Example:
    from clip_concat.monitoring import configure_logging

    logger = configure_logging(level="debug")
"""

from clip_concat.monitoring.logging import (
    StructuredLogger,
    LogLevel,
    configure_logging,
    get_logger,
)

__all__ = [
    "StructuredLogger",
    "LogLevel",
    "configure_logging",
    "get_logger",
]
