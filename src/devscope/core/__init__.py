"""Shared primitives used by every recorder."""

from devscope.core.body import Body, BodyKind
from devscope.core.buffer import BoundedEventBuffer
from devscope.core.notifier import ChangeNotifier
from devscope.core.redaction import (
    DEFAULT_REDACTED_HEADERS,
    REDACTED_PLACEHOLDER,
    RedactionPolicy,
    redact_fields,
)

__all__ = [
    "DEFAULT_REDACTED_HEADERS",
    "REDACTED_PLACEHOLDER",
    "Body",
    "BodyKind",
    "BoundedEventBuffer",
    "ChangeNotifier",
    "RedactionPolicy",
    "redact_fields",
]
