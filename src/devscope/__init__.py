"""DevScope: in-process telemetry capture for developer diagnostics.

Records network calls, leveled log events, and frame-performance samples
into bounded in-memory buffers that a presentation layer can query,
export, and subscribe to.
"""

__version__ = "0.1.0"

from devscope.devtools import DevTools, get_devtools, install, uninstall  # noqa: E402
from devscope.logs import LogLevel, LogRecorder, RecorderHandler  # noqa: E402
from devscope.models.config import DevScopeConfig  # noqa: E402
from devscope.network import NetworkRecorder, NetworkStatusFilter, record_call  # noqa: E402
from devscope.performance import FrameTiming, PerformanceSampler  # noqa: E402

__all__ = [
    "DevScopeConfig",
    "DevTools",
    "FrameTiming",
    "LogLevel",
    "LogRecorder",
    "NetworkRecorder",
    "NetworkStatusFilter",
    "PerformanceSampler",
    "RecorderHandler",
    "__version__",
    "get_devtools",
    "install",
    "record_call",
    "uninstall",
]
