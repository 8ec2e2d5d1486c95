"""LogRecorder: bounded capture of leveled text events."""

from __future__ import annotations

import itertools
import json
import logging
import time
import traceback
from collections.abc import Callable
from datetime import datetime
from types import TracebackType
from typing import Any

from devscope.core.buffer import BoundedEventBuffer
from devscope.core.notifier import ChangeNotifier
from devscope.logs.models import LogLevel, LogRecord

# Captured records are mirrored here when echo is on.
console_logger = logging.getLogger("devscope.console")

Clock = Callable[[], datetime]


def local_now() -> datetime:
    return datetime.now().astimezone()


def _format_stack(
    stack_trace: str | TracebackType | None, error: Any
) -> str | None:
    if isinstance(stack_trace, str):
        return stack_trace
    if isinstance(stack_trace, TracebackType):
        return "".join(traceback.format_tb(stack_trace))
    if isinstance(error, BaseException) and error.__traceback__ is not None:
        return "".join(traceback.format_tb(error.__traceback__))
    return None


class LogRecorder:
    """Bounded recorder of log events.

    Args:
        max_records: Buffer capacity; oldest events are evicted first.
        enabled: Global switch; log calls are no-ops when False.
        echo: Mirror each captured record to the devscope.console logger.
        clock: Wall-clock source for timestamps.
    """

    def __init__(
        self,
        max_records: int = 500,
        enabled: bool = True,
        echo: bool = True,
        clock: Clock = local_now,
    ) -> None:
        self._buffer: BoundedEventBuffer[LogRecord] = BoundedEventBuffer(max_records)
        self._sequence = itertools.count()
        self._clock = clock
        self.enabled = enabled
        self.echo = echo
        self.notifier = ChangeNotifier()

    @property
    def max_records(self) -> int:
        return self._buffer.capacity

    @max_records.setter
    def max_records(self, capacity: int) -> None:
        if self._buffer.resize(capacity):
            self.notifier.bump()

    # -- ingestion --

    def log(
        self,
        message: str,
        tag: str | None = None,
        level: LogLevel = LogLevel.debug,
    ) -> LogRecord | None:
        """Capture a message. Returns the record, or None when disabled."""
        if not self.enabled:
            return None
        return self._add(
            LogRecord(
                id=self._next_id(),
                message=message,
                tag=tag,
                level=level,
                timestamp=self._clock(),
            )
        )

    def log_error(
        self,
        message: str,
        error: Any = None,
        stack_trace: str | TracebackType | None = None,
        tag: str | None = None,
    ) -> LogRecord | None:
        """Capture an error-level message with an optional error value.

        When no stack trace is given and error is an exception carrying
        a traceback, that traceback is used.
        """
        if not self.enabled:
            return None
        return self._add(
            LogRecord(
                id=self._next_id(),
                message=message,
                tag=tag,
                level=LogLevel.error,
                timestamp=self._clock(),
                error=None if error is None else str(error),
                stack_trace=_format_stack(stack_trace, error),
            )
        )

    def verbose(self, message: str, tag: str | None = None) -> LogRecord | None:
        return self.log(message, tag=tag, level=LogLevel.verbose)

    def debug(self, message: str, tag: str | None = None) -> LogRecord | None:
        return self.log(message, tag=tag, level=LogLevel.debug)

    def info(self, message: str, tag: str | None = None) -> LogRecord | None:
        return self.log(message, tag=tag, level=LogLevel.info)

    def warning(self, message: str, tag: str | None = None) -> LogRecord | None:
        return self.log(message, tag=tag, level=LogLevel.warning)

    def error(
        self,
        message: str,
        err: Any = None,
        stack_trace: str | TracebackType | None = None,
        tag: str | None = None,
    ) -> LogRecord | None:
        return self.log_error(message, error=err, stack_trace=stack_trace, tag=tag)

    # -- queries --

    @property
    def records(self) -> list[LogRecord]:
        """All records, newest first."""
        return list(self._buffer.snapshot_newest_first())

    @property
    def count(self) -> int:
        return len(self._buffer)

    def get_count_by_level(self, level: LogLevel) -> int:
        return sum(1 for r in self._buffer if r.level == level)

    def filter_by_level(self, level: LogLevel | None) -> list[LogRecord]:
        """Records at exactly the given level, newest first; None means all."""
        if level is None:
            return self.records
        return [r for r in self.records if r.level == level]

    def search(self, query: str) -> list[LogRecord]:
        """Case-insensitive substring match on message, tag, and level name."""
        needle = query.lower()
        return [
            r
            for r in self.records
            if needle in r.message.lower()
            or (r.tag is not None and needle in r.tag.lower())
            or needle in r.level.label.lower()
        ]

    # -- maintenance and export --

    def clear(self) -> None:
        self._buffer.clear()
        self.notifier.bump()

    def export_structured(self) -> str:
        """Export every record as an indented JSON array, oldest first."""
        data = [r.model_dump(mode="json") for r in self._buffer]
        return json.dumps(data, indent=2, ensure_ascii=False)

    def export_flattened(self) -> str:
        """Export one line per record, oldest first."""
        return "\n".join(r.flattened for r in self._buffer)

    # -- internals --

    def _next_id(self) -> str:
        return f"{time.monotonic_ns()}_{next(self._sequence)}"

    def _add(self, record: LogRecord) -> LogRecord:
        self._buffer.append(record)
        self.notifier.bump()
        if self.echo:
            console_logger.log(record.level.to_logging(), record.formatted)
        return record
