"""Frame-performance sampling and periodic rollups."""

from devscope.performance.models import (
    JANK_THRESHOLD,
    FpsStatus,
    FrameSample,
    FrameTiming,
    PerformanceReport,
    PerformanceSnapshot,
)
from devscope.performance.sampler import PerformanceSampler, SamplerState
from devscope.performance.sources import (
    FrameTimingSource,
    ManualFrameSource,
    PeriodicTimer,
    asyncio_timer,
)

__all__ = [
    "JANK_THRESHOLD",
    "FpsStatus",
    "FrameSample",
    "FrameTiming",
    "FrameTimingSource",
    "ManualFrameSource",
    "PerformanceReport",
    "PerformanceSampler",
    "PerformanceSnapshot",
    "PeriodicTimer",
    "SamplerState",
    "asyncio_timer",
]
