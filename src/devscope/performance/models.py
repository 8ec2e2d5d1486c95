"""Frame timing and performance rollup models.

All durations export as integer microseconds.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from enum import Enum
from typing import NamedTuple

from pydantic import BaseModel

from devscope.core.durations import MicrosecondDuration

# Frame budget at 60 fps (1000 / 60 ms). Frames above it are jank.
JANK_THRESHOLD = timedelta(microseconds=16_667)


class FrameTiming(NamedTuple):
    """Raw timing delivered by a frame source for one rendered frame."""

    build_duration: timedelta
    raster_duration: timedelta


class FrameSample(BaseModel):
    """One frame inside the sampler's sliding window."""

    model_config = {"frozen": True, "extra": "forbid"}

    build_duration: MicrosecondDuration
    raster_duration: MicrosecondDuration

    @property
    def total_duration(self) -> timedelta:
        return self.build_duration + self.raster_duration

    @property
    def is_jank(self) -> bool:
        return self.total_duration > JANK_THRESHOLD


class PerformanceSnapshot(BaseModel):
    """Periodic rollup of the sampler state.

    rebuild_count covers only the period since the previous snapshot.
    """

    model_config = {"frozen": True, "extra": "forbid"}

    timestamp: datetime
    fps: float
    frame_count: int
    avg_build_time: MicrosecondDuration
    avg_raster_time: MicrosecondDuration
    memory_usage_mb: int
    rebuild_count: int

    @property
    def formatted(self) -> str:
        return (
            f"{self.timestamp.isoformat()} fps={self.fps:.1f} "
            f"frames={self.frame_count} "
            f"build={self.avg_build_time.total_seconds() * 1000:.2f}ms "
            f"raster={self.avg_raster_time.total_seconds() * 1000:.2f}ms "
            f"memory={self.memory_usage_mb}MB rebuilds={self.rebuild_count}"
        )


class FpsStatus(str, Enum):
    """Frame rate classification."""

    good = "good"  # >= 55 fps
    ok = "ok"  # >= 30 fps
    bad = "bad"  # < 30 fps

    @classmethod
    def classify(cls, fps: float) -> FpsStatus:
        if fps >= 55:
            return cls.good
        if fps >= 30:
            return cls.ok
        return cls.bad


class PerformanceReport(BaseModel):
    """Structured export of a sampler: current aggregates plus history."""

    model_config = {"frozen": True, "extra": "forbid"}

    current_fps: float
    avg_build_time: MicrosecondDuration
    avg_raster_time: MicrosecondDuration
    jank_frame_count: int
    jank_percentage: float
    fps_status: FpsStatus
    snapshots: list[PerformanceSnapshot]
