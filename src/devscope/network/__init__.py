"""Network call capture: two-phase request/response recording."""

from devscope.network.instrument import record_call
from devscope.network.models import (
    NetworkRecord,
    NetworkStatusFilter,
    filter_by_status,
    format_bytes,
)
from devscope.network.recorder import NetworkRecorder

__all__ = [
    "NetworkRecord",
    "NetworkRecorder",
    "NetworkStatusFilter",
    "filter_by_status",
    "format_bytes",
    "record_call",
]
