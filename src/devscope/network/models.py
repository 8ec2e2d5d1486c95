"""Pydantic models for captured network calls.

A NetworkRecord is created pending when a request starts and replaced
by a completed copy when its status or error arrives. Success, failure,
pending state, and URL decomposition are derived on read and never
stored.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime
from enum import Enum
from urllib.parse import parse_qsl, urlsplit

from pydantic import BaseModel, Field

from devscope.core.body import Body
from devscope.core.durations import MillisecondDuration


class NetworkStatusFilter(str, Enum):
    """Status buckets accepted by NetworkRecorder.filter_by_status."""

    all = "all"
    success = "success"
    error = "error"
    pending = "pending"


class NetworkRecord(BaseModel):
    """One HTTP-like call, pending or completed.

    Headers are stored already redacted. duration exports in
    milliseconds.
    """

    model_config = {"frozen": True, "extra": "forbid"}

    id: str
    method: str
    url: str
    request_headers: dict[str, str] | None = None
    request_body: Body = Field(default_factory=Body)
    status_code: int | None = None
    response_body: Body = Field(default_factory=Body)
    response_headers: dict[str, str] | None = None
    timestamp: datetime
    completed_at: datetime | None = None
    duration: MillisecondDuration | None = None
    error: str | None = None
    request_size: int | None = None
    response_size: int | None = None

    @property
    def is_success(self) -> bool:
        return self.status_code is not None and 200 <= self.status_code < 300

    @property
    def is_pending(self) -> bool:
        return self.status_code is None and self.error is None

    @property
    def is_error(self) -> bool:
        return self.error is not None or (
            self.status_code is not None and self.status_code >= 400
        )

    def matches_status(self, status: NetworkStatusFilter | str) -> bool:
        """Whether this record falls in the given status bucket."""
        status = NetworkStatusFilter(status)
        if status is NetworkStatusFilter.success:
            return self.is_success
        if status is NetworkStatusFilter.error:
            return self.is_error
        if status is NetworkStatusFilter.pending:
            return self.is_pending
        return True

    @property
    def status_text(self) -> str:
        if self.error is not None:
            return "ERROR"
        if self.status_code is None:
            return "PENDING"
        return str(self.status_code)

    @property
    def path(self) -> str:
        """URL path, "/" when empty; the raw URL if it cannot be parsed."""
        try:
            path = urlsplit(self.url).path
        except ValueError:
            return self.url
        return path or "/"

    @property
    def host(self) -> str:
        try:
            return urlsplit(self.url).hostname or ""
        except ValueError:
            return ""

    @property
    def query_params(self) -> dict[str, str]:
        try:
            return dict(parse_qsl(urlsplit(self.url).query))
        except ValueError:
            return {}

    @property
    def formatted_request_body(self) -> str:
        return self.request_body.formatted() or "No body"

    @property
    def formatted_response_body(self) -> str:
        formatted = self.response_body.formatted()
        if formatted is None:
            return self.error or "No response"
        return formatted

    @property
    def formatted_request_size(self) -> str:
        return "-" if self.request_size is None else format_bytes(self.request_size)

    @property
    def formatted_response_size(self) -> str:
        return "-" if self.response_size is None else format_bytes(self.response_size)

    @property
    def formatted(self) -> str:
        """Single-line summary used by the flattened export."""
        parts = [
            self.timestamp.isoformat(),
            self.method,
            self.url,
            "->",
            self.status_text,
        ]
        if self.duration is not None:
            parts.append(f"{self.duration.total_seconds() * 1000:.0f}ms")
        parts.append(f"req={self.formatted_request_size}")
        parts.append(f"res={self.formatted_response_size}")
        if self.error is not None:
            parts.append(f"error={_escape_newlines(self.error)}")
        return " ".join(parts)


def filter_by_status(
    records: Iterable[NetworkRecord], status: NetworkStatusFilter | str
) -> list[NetworkRecord]:
    """Records in the given status bucket, in their original order."""
    status = NetworkStatusFilter(status)
    return [r for r in records if r.matches_status(status)]


def format_bytes(size: int) -> str:
    """Format a byte count as B, KB, or MB with one decimal place."""
    if size < 1024:
        return f"{size} B"
    if size < 1024 * 1024:
        return f"{size / 1024:.1f} KB"
    return f"{size / (1024 * 1024):.1f} MB"


def _escape_newlines(text: str) -> str:
    return text.replace("\n", "\\n")
