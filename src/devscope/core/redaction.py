"""Header redaction for captured network traffic.

Blocked field names match case-insensitively; matching values are
replaced by REDACTED_PLACEHOLDER while the key set is preserved.
Bodies are never redacted.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

REDACTED_PLACEHOLDER = "[REDACTED]"

# Headers redacted unless the caller configures its own list.
DEFAULT_REDACTED_HEADERS: tuple[str, ...] = ("Authorization", "Cookie", "X-Api-Key")


def redact_fields(
    fields: Mapping[Any, Any],
    blocked: Iterable[str],
) -> dict[str, str]:
    """Return a sanitized copy of fields with blocked names redacted.

    Args:
        fields: Header or field map. Not mutated. Keys and values are
            converted to str so numeric header values are accepted.
        blocked: Field names to redact, matched case-insensitively.

    Returns:
        A new dict with the same keys, in the same order.
    """
    lowered = {name.lower() for name in blocked}
    redacted: dict[str, str] = {}
    for key, value in fields.items():
        name = str(key)
        redacted[name] = REDACTED_PLACEHOLDER if name.lower() in lowered else str(value)
    return redacted


class RedactionPolicy:
    """Reusable redaction rule bound to a set of blocked names."""

    def __init__(self, blocked: Iterable[str] = DEFAULT_REDACTED_HEADERS) -> None:
        self.blocked = blocked

    @property
    def blocked(self) -> tuple[str, ...]:
        return self._blocked

    @blocked.setter
    def blocked(self, names: Iterable[str]) -> None:
        self._blocked = tuple(names)

    def apply(self, fields: Mapping[Any, Any] | None) -> dict[str, str] | None:
        """Redact a header map; None passes through as None."""
        if fields is None:
            return None
        return redact_fields(fields, self._blocked)
