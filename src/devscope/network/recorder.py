"""NetworkRecorder: two-phase capture of HTTP-like calls.

Records live in an id-keyed arena; the bounded buffer holds only the
correlation ids in insertion order. Completion looks the id up in the
arena directly, and buffer evictions delete the matching arena entry.
"""

from __future__ import annotations

import itertools
import json
import logging
import time
from collections.abc import Callable, Iterable, Mapping
from datetime import datetime, timedelta, timezone
from typing import Any

from devscope.core.body import Body
from devscope.core.buffer import BoundedEventBuffer
from devscope.core.notifier import ChangeNotifier
from devscope.core.redaction import DEFAULT_REDACTED_HEADERS, RedactionPolicy
from devscope.network.models import NetworkRecord, NetworkStatusFilter, filter_by_status

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class NetworkRecorder:
    """Bounded recorder of network calls keyed by correlation id.

    Args:
        max_records: Buffer capacity; oldest calls are evicted first.
        redacted_headers: Header names redacted case-insensitively.
        enabled: Global switch; ingestion is a no-op when False.
        clock: Wall-clock source for timestamps.
    """

    def __init__(
        self,
        max_records: int = 100,
        redacted_headers: Iterable[str] = DEFAULT_REDACTED_HEADERS,
        enabled: bool = True,
        clock: Clock = utc_now,
    ) -> None:
        self._order: BoundedEventBuffer[str] = BoundedEventBuffer(max_records)
        self._records: dict[str, NetworkRecord] = {}
        self._sequence = itertools.count()
        self._policy = RedactionPolicy(redacted_headers)
        self._clock = clock
        self.enabled = enabled
        self.notifier = ChangeNotifier()
        # Diagnostics for instrumentation bugs; never reset by clear().
        self.dropped_completions = 0
        self.repeated_completions = 0

    # -- configuration --

    @property
    def max_records(self) -> int:
        return self._order.capacity

    @max_records.setter
    def max_records(self, capacity: int) -> None:
        evicted = self._order.resize(capacity)
        if evicted:
            self._forget(evicted)
            self.notifier.bump()

    @property
    def redacted_headers(self) -> tuple[str, ...]:
        return self._policy.blocked

    @redacted_headers.setter
    def redacted_headers(self, names: Iterable[str]) -> None:
        self._policy.blocked = names

    # -- ingestion --

    def begin_request(
        self,
        method: str,
        url: str,
        headers: Mapping[str, str] | None = None,
        body: Any = None,
    ) -> str:
        """Record the start of a call and return its correlation id.

        Returns an empty string, and records nothing, when disabled.
        """
        if not self.enabled:
            return ""

        request_body = Body.of(body)
        record = NetworkRecord(
            id=self._next_id(),
            method=method.upper(),
            url=url,
            request_headers=self._policy.apply(headers),
            request_body=request_body,
            timestamp=self._clock(),
            request_size=request_body.size(),
        )
        self._insert(record)
        return record.id

    def complete_request(
        self,
        correlation_id: str,
        status_code: int | None = None,
        body: Any = None,
        headers: Mapping[str, str] | None = None,
        duration: timedelta | None = None,
        error: str | None = None,
    ) -> None:
        """Attach the response (or error) to a pending call.

        Unknown or already-evicted ids are ignored. Completing the same
        id twice keeps the last completion.
        """
        if not self.enabled:
            return

        existing = self._records.get(correlation_id)
        if existing is None:
            self.dropped_completions += 1
            logger.debug("Dropped completion for unknown request id %r", correlation_id)
            return
        if not existing.is_pending:
            self.repeated_completions += 1
            logger.debug("Request %r completed more than once", correlation_id)

        response_body = Body.of(body)
        self._records[correlation_id] = existing.model_copy(
            update={
                "status_code": status_code,
                "response_body": response_body,
                "response_headers": self._policy.apply(headers),
                "completed_at": self._clock(),
                "duration": duration,
                "error": error,
                "response_size": response_body.size(),
            }
        )
        self.notifier.bump()

    def record_complete(
        self,
        method: str,
        url: str,
        request_headers: Mapping[str, str] | None = None,
        request_body: Any = None,
        status_code: int | None = None,
        response_body: Any = None,
        response_headers: Mapping[str, str] | None = None,
        duration: timedelta | None = None,
        error: str | None = None,
    ) -> str:
        """Record a call whose request and outcome are both known.

        Returns:
            The new record's id, or an empty string when disabled.
        """
        if not self.enabled:
            return ""

        req = Body.of(request_body)
        res = Body.of(response_body)
        now = self._clock()
        record = NetworkRecord(
            id=self._next_id(),
            method=method.upper(),
            url=url,
            request_headers=self._policy.apply(request_headers),
            request_body=req,
            status_code=status_code,
            response_body=res,
            response_headers=self._policy.apply(response_headers),
            timestamp=now,
            completed_at=now,
            duration=duration,
            error=error,
            request_size=req.size(),
            response_size=res.size(),
        )
        self._insert(record)
        return record.id

    # -- queries --

    @property
    def records(self) -> list[NetworkRecord]:
        """All records, newest first."""
        return [self._records[i] for i in self._order.snapshot_newest_first()]

    def get(self, correlation_id: str) -> NetworkRecord | None:
        return self._records.get(correlation_id)

    @property
    def count(self) -> int:
        return len(self._order)

    @property
    def success_count(self) -> int:
        return sum(1 for r in self._records.values() if r.is_success)

    @property
    def error_count(self) -> int:
        return sum(1 for r in self._records.values() if r.is_error)

    @property
    def pending_count(self) -> int:
        return sum(1 for r in self._records.values() if r.is_pending)

    def search(self, query: str) -> list[NetworkRecord]:
        """Case-insensitive substring match on URL, method, and status text."""
        needle = query.lower()
        return [
            r
            for r in self.records
            if needle in r.url.lower()
            or needle in r.method.lower()
            or needle in r.status_text.lower()
        ]

    def filter_by_status(
        self, status: NetworkStatusFilter | str
    ) -> list[NetworkRecord]:
        """Records in the given status bucket, newest first."""
        return filter_by_status(self.records, status)

    # -- maintenance and export --

    def clear(self) -> None:
        self._order.clear()
        self._records.clear()
        self.notifier.bump()

    def export_structured(self) -> str:
        """Export every record as an indented JSON array, oldest first."""
        data = [self._records[i].model_dump(mode="json") for i in self._order]
        return json.dumps(data, indent=2, ensure_ascii=False)

    def export_flattened(self) -> str:
        """Export one summary line per record, oldest first."""
        return "\n".join(self._records[i].formatted for i in self._order)

    # -- internals --

    def _next_id(self) -> str:
        # Monotonic nanoseconds plus a sequence number stay unique within
        # the same clock tick.
        return f"{time.monotonic_ns()}_{next(self._sequence)}"

    def _insert(self, record: NetworkRecord) -> None:
        self._records[record.id] = record
        self._forget(self._order.append(record.id))
        self.notifier.bump()

    def _forget(self, ids: list[str]) -> None:
        for evicted in ids:
            self._records.pop(evicted, None)
