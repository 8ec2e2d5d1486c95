"""Closed sum type for request and response bodies.

A body is absent, text, a structured JSON-like value, or raw bytes.
The kind decides how its size is estimated, how it is pretty-printed,
and how it is exported.
"""

from __future__ import annotations

import base64
import json
from enum import Enum
from typing import Any

from pydantic import BaseModel, field_serializer, model_validator

# Errors json.dumps raises for values it cannot encode.
_ENCODE_ERRORS = (TypeError, ValueError, OverflowError)


class BodyKind(str, Enum):
    """Which variant a Body holds."""

    absent = "absent"
    text = "text"
    json = "json"
    bytes = "bytes"


class Body(BaseModel):
    """An opaque request/response payload.

    Build instances with Body.of(); the kind is inferred from the
    Python type of the value.
    """

    model_config = {"frozen": True, "extra": "forbid"}

    kind: BodyKind = BodyKind.absent
    value: Any = None

    @classmethod
    def of(cls, value: Any) -> Body:
        """Wrap an arbitrary payload in the matching Body variant."""
        if isinstance(value, Body):
            return value
        if value is None:
            return cls()
        if isinstance(value, str):
            return cls(kind=BodyKind.text, value=value)
        if isinstance(value, (bytes, bytearray, memoryview)):
            return cls(kind=BodyKind.bytes, value=bytes(value))
        return cls(kind=BodyKind.json, value=value)

    @model_validator(mode="before")
    @classmethod
    def _decode_exported_bytes(cls, data: Any) -> Any:
        if (
            isinstance(data, dict)
            and data.get("kind") == BodyKind.bytes.value
            and isinstance(data.get("value"), str)
        ):
            return {**data, "value": base64.b64decode(data["value"])}
        return data

    @property
    def is_absent(self) -> bool:
        return self.kind is BodyKind.absent

    def size(self) -> int | None:
        """Estimated payload size in bytes, or None when unknown.

        Structured values are measured as compact UTF-8 JSON. A value
        that cannot be encoded yields None instead of raising.
        """
        if self.kind is BodyKind.absent:
            return None
        if self.kind is BodyKind.bytes:
            return len(self.value)
        if self.kind is BodyKind.text:
            return len(self.value.encode("utf-8"))
        try:
            encoded = json.dumps(self.value, ensure_ascii=False, separators=(",", ":"))
        except _ENCODE_ERRORS:
            return None
        return len(encoded.encode("utf-8"))

    def formatted(self) -> str | None:
        """Human-readable rendering; JSON and JSON text are indented."""
        if self.kind is BodyKind.absent:
            return None
        if self.kind is BodyKind.bytes:
            return f"<{len(self.value)} bytes>"
        if self.kind is BodyKind.text:
            try:
                decoded = json.loads(self.value)
            except ValueError:
                return self.value
            return json.dumps(decoded, indent=2, ensure_ascii=False)
        try:
            return json.dumps(self.value, indent=2, ensure_ascii=False)
        except _ENCODE_ERRORS:
            return str(self.value)

    @field_serializer("value")
    def _serialize_value(self, value: Any) -> Any:
        if self.kind is BodyKind.bytes:
            return base64.b64encode(value).decode("ascii")
        if self.kind is BodyKind.json:
            return _jsonable(value)
        return value


def _jsonable(value: Any) -> Any:
    """Coerce a structured value into plain JSON types.

    Unknown leaf objects fall back to str(); values that still cannot be
    encoded (e.g. circular references) export as their repr.
    """
    try:
        return json.loads(json.dumps(value, default=str))
    except _ENCODE_ERRORS:
        return repr(value)
