"""Duration field types for exported models.

Exports carry durations as plain numbers: network timings in
milliseconds, frame timings in microseconds. The annotated types below
serialize that way in JSON mode and accept the same numbers back on
validation, so exported documents load into the same models.
"""

from __future__ import annotations

from datetime import timedelta
from typing import Annotated, Any

from pydantic import BeforeValidator, PlainSerializer


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _from_milliseconds(value: Any) -> Any:
    if _is_number(value):
        return timedelta(milliseconds=value)
    return value


def _from_microseconds(value: Any) -> Any:
    if _is_number(value):
        return timedelta(microseconds=value)
    return value


def to_milliseconds(value: timedelta) -> float:
    return value / timedelta(milliseconds=1)


def to_microseconds(value: timedelta) -> int:
    return value // timedelta(microseconds=1)


MillisecondDuration = Annotated[
    timedelta,
    BeforeValidator(_from_milliseconds),
    PlainSerializer(to_milliseconds, return_type=float, when_used="json"),
]

MicrosecondDuration = Annotated[
    timedelta,
    BeforeValidator(_from_microseconds),
    PlainSerializer(to_microseconds, return_type=int, when_used="json"),
]
