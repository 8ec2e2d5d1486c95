"""Pydantic models for captured log events."""

from __future__ import annotations

import logging
from datetime import datetime
from enum import IntEnum

from pydantic import BaseModel, field_serializer, field_validator


class LogLevel(IntEnum):
    """Ordered log severity: verbose < debug < info < warning < error."""

    verbose = 0
    debug = 1
    info = 2
    warning = 3
    error = 4

    @property
    def label(self) -> str:
        return self.name.upper()

    def to_logging(self) -> int:
        """Matching stdlib logging level number."""
        return _TO_LOGGING[self]

    @classmethod
    def from_logging(cls, levelno: int) -> LogLevel:
        """Map a stdlib logging level number onto the nearest LogLevel."""
        if levelno >= logging.ERROR:
            return cls.error
        if levelno >= logging.WARNING:
            return cls.warning
        if levelno >= logging.INFO:
            return cls.info
        if levelno >= logging.DEBUG:
            return cls.debug
        return cls.verbose


_TO_LOGGING = {
    LogLevel.verbose: 5,
    LogLevel.debug: logging.DEBUG,
    LogLevel.info: logging.INFO,
    LogLevel.warning: logging.WARNING,
    LogLevel.error: logging.ERROR,
}


class LogRecord(BaseModel):
    """A single immutable log event.

    error holds the string form of the attached error value;
    stack_trace holds formatted traceback text.
    """

    model_config = {"frozen": True, "extra": "forbid"}

    id: str
    message: str
    tag: str | None = None
    level: LogLevel
    timestamp: datetime
    error: str | None = None
    stack_trace: str | None = None

    @field_validator("level", mode="before")
    @classmethod
    def _parse_level_name(cls, value: object) -> object:
        if isinstance(value, str):
            return LogLevel[value.lower()]
        return value

    @field_serializer("level")
    def _serialize_level(self, level: LogLevel) -> str:
        return level.name

    @property
    def formatted_time(self) -> str:
        """Local wall time as HH:MM:SS.mmm."""
        ts = self.timestamp
        return f"{ts:%H:%M:%S}.{ts.microsecond // 1000:03d}"

    @property
    def formatted(self) -> str:
        """Multi-line console form with error and stack trace lines."""
        lines = [self._headline()]
        if self.error is not None:
            lines.append(f"Error: {self.error}")
        if self.stack_trace is not None:
            lines.append(f"StackTrace: {self.stack_trace.rstrip()}")
        return "\n".join(lines)

    @property
    def flattened(self) -> str:
        """Single-line form; embedded newlines are escaped."""
        line = self._headline()
        if self.error is not None:
            line += f" | Error: {self.error}"
        if self.stack_trace is not None:
            line += f" | StackTrace: {self.stack_trace.rstrip()}"
        return line.replace("\n", "\\n")

    def _headline(self) -> str:
        tag = f" [{self.tag}]" if self.tag is not None else ""
        return f"[{self.formatted_time}] [{self.level.label}]{tag}: {self.message}"
