"""Leveled text event capture."""

from devscope.logs.handler import RecorderHandler
from devscope.logs.models import LogLevel, LogRecord
from devscope.logs.recorder import LogRecorder

__all__ = [
    "LogLevel",
    "LogRecord",
    "LogRecorder",
    "RecorderHandler",
]
