"""Python logging handler adapter for LogRecorder.

Bridges the standard library logging module into a LogRecorder so
that existing logger calls show up alongside explicit captures.
"""

from __future__ import annotations

import logging
import traceback

from devscope.logs.models import LogLevel
from devscope.logs.recorder import LogRecorder

# Loggers under this prefix belong to the library itself (including the
# echo logger) and are never captured, so echoing cannot loop.
_INTERNAL_PREFIX = "devscope"


class RecorderHandler(logging.Handler):
    """Logging handler that writes log records into a LogRecorder.

    Example:
        ```python
        recorder = LogRecorder()
        logging.getLogger().addHandler(RecorderHandler(recorder))
        ```

    The logger name becomes the tag. Records carrying exc_info are
    captured at error level with the exception text and traceback.
    """

    def __init__(self, recorder: LogRecorder, level: int = logging.NOTSET) -> None:
        super().__init__(level)
        self.recorder = recorder

    def emit(self, record: logging.LogRecord) -> None:
        if record.name == _INTERNAL_PREFIX or record.name.startswith(
            _INTERNAL_PREFIX + "."
        ):
            return
        try:
            message = record.getMessage()
            level = LogLevel.from_logging(record.levelno)
            if record.exc_info and record.exc_info[1] is not None:
                _, exc_value, exc_tb = record.exc_info
                self.recorder.log_error(
                    message,
                    error=exc_value,
                    stack_trace="".join(traceback.format_tb(exc_tb)) if exc_tb else None,
                    tag=record.name,
                )
            elif level is LogLevel.error:
                self.recorder.log_error(message, tag=record.name)
            else:
                self.recorder.log(message, tag=record.name, level=level)
        except Exception:
            self.handleError(record)
