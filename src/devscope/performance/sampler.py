"""PerformanceSampler: sliding-window frame statistics and rollups.

Idle/Monitoring state machine. While monitoring, frame timings from the
source feed a bounded window whose running integer sums (microseconds)
give exact rolling averages, and a one-second timer appends a
PerformanceSnapshot to a bounded history.
"""

from __future__ import annotations

import json
import logging
import sys
from collections.abc import Callable, Sequence
from datetime import datetime, timedelta, timezone
from enum import Enum

from devscope.core.buffer import BoundedEventBuffer
from devscope.core.durations import to_microseconds
from devscope.core.notifier import ChangeNotifier
from devscope.performance.models import (
    FpsStatus,
    FrameSample,
    FrameTiming,
    PerformanceReport,
    PerformanceSnapshot,
)
from devscope.performance.sources import (
    FrameTimingSource,
    ManualFrameSource,
    TimerFactory,
    asyncio_timer,
)

logger = logging.getLogger(__name__)

SNAPSHOT_PERIOD_SECONDS = 1.0
DEFAULT_FPS = 60.0
MAX_FPS = 120.0
# Averages need at least this many frames in the window.
MIN_SAMPLES = 2


class SamplerState(str, Enum):
    idle = "idle"
    monitoring = "monitoring"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def process_memory_mb() -> int:
    """Peak resident set size of this process in MB; 0 where unsupported."""
    if sys.platform == "win32":
        return 0
    import resource

    peak = resource.getrusage(resource.RUSAGE_SELF).ru_maxrss
    # ru_maxrss is bytes on macOS and kilobytes on Linux.
    divisor = 1024 * 1024 if sys.platform == "darwin" else 1024
    return int(peak // divisor)


class PerformanceSampler:
    """Frame-rate and jank sampler fed by a FrameTimingSource.

    Args:
        frame_source: Where frame timings come from. Defaults to a
            ManualFrameSource the host pushes into.
        timer_factory: Arms the periodic snapshot timer.
        max_frame_samples: Sliding window size (120 is ~2s at 60 fps).
        max_snapshots: Snapshot history size (60 is one minute).
        enabled: Global switch; start and ingestion are no-ops when False.
        clock: Wall-clock source for snapshot timestamps.
        memory_probe: Returns a memory estimate in MB.
    """

    def __init__(
        self,
        frame_source: FrameTimingSource | None = None,
        timer_factory: TimerFactory = asyncio_timer,
        max_frame_samples: int = 120,
        max_snapshots: int = 60,
        enabled: bool = True,
        clock: Callable[[], datetime] = utc_now,
        memory_probe: Callable[[], int] = process_memory_mb,
    ) -> None:
        self.frame_source = frame_source if frame_source is not None else ManualFrameSource()
        self._timer_factory = timer_factory
        self._clock = clock
        self._memory_probe = memory_probe
        self.enabled = enabled
        self.notifier = ChangeNotifier()
        self.state = SamplerState.idle
        self._timer = None

        self._frames: BoundedEventBuffer[FrameSample] = BoundedEventBuffer(max_frame_samples)
        self._snapshots: BoundedEventBuffer[PerformanceSnapshot] = BoundedEventBuffer(
            max_snapshots
        )
        self._reset_aggregates()

    def _reset_aggregates(self) -> None:
        self._build_us_total = 0
        self._raster_us_total = 0
        self._window_jank = 0
        self._jank_frame_count = 0
        self._rebuild_count = 0
        self._current_fps = DEFAULT_FPS
        self._avg_build_time = timedelta(0)
        self._avg_raster_time = timedelta(0)

    # -- configuration --

    @property
    def max_frame_samples(self) -> int:
        return self._frames.capacity

    @max_frame_samples.setter
    def max_frame_samples(self, capacity: int) -> None:
        evicted = self._frames.resize(capacity)
        if evicted:
            for sample in evicted:
                self._discount(sample)
            self._recompute()
            self.notifier.bump()

    @property
    def max_snapshots(self) -> int:
        return self._snapshots.capacity

    @max_snapshots.setter
    def max_snapshots(self, capacity: int) -> None:
        if self._snapshots.resize(capacity):
            self.notifier.bump()

    # -- state machine --

    @property
    def is_monitoring(self) -> bool:
        return self.state is SamplerState.monitoring

    def start(self) -> None:
        """Subscribe to frame timings and arm the snapshot timer."""
        if self.is_monitoring or not self.enabled:
            return
        self.state = SamplerState.monitoring
        self.frame_source.add_timings_callback(self._on_frame_timings)
        try:
            self._timer = self._timer_factory(SNAPSHOT_PERIOD_SECONDS, self._take_snapshot)
        except RuntimeError:
            logger.warning(
                "No running event loop; periodic performance snapshots are disabled"
            )
            self._timer = None
        self.notifier.bump()

    def stop(self) -> None:
        """Unsubscribe from frame timings and disarm the timer."""
        if not self.is_monitoring:
            return
        self.state = SamplerState.idle
        self.frame_source.remove_timings_callback(self._on_frame_timings)
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        self.notifier.bump()

    # -- ingestion --

    def track_rebuild(self) -> None:
        """Count one rebuild toward the next snapshot. No-op while idle."""
        if not self.is_monitoring or not self.enabled:
            return
        self._rebuild_count += 1

    def reset_rebuild_counter(self) -> None:
        self._rebuild_count = 0
        self.notifier.bump()

    def _on_frame_timings(self, timings: Sequence[FrameTiming]) -> None:
        if not self.is_monitoring or not self.enabled:
            return
        for timing in timings:
            sample = FrameSample(
                build_duration=timing.build_duration,
                raster_duration=timing.raster_duration,
            )
            if sample.is_jank:
                self._jank_frame_count += 1
                self._window_jank += 1
            self._build_us_total += to_microseconds(sample.build_duration)
            self._raster_us_total += to_microseconds(sample.raster_duration)
            for evicted in self._frames.append(sample):
                self._discount(evicted)
        self._recompute()
        self.notifier.bump()

    def _discount(self, sample: FrameSample) -> None:
        self._build_us_total -= to_microseconds(sample.build_duration)
        self._raster_us_total -= to_microseconds(sample.raster_duration)
        if sample.is_jank:
            self._window_jank -= 1

    def _recompute(self) -> None:
        n = len(self._frames)
        if n < MIN_SAMPLES:
            return
        self._avg_build_time = timedelta(microseconds=self._build_us_total // n)
        self._avg_raster_time = timedelta(microseconds=self._raster_us_total // n)
        avg_frame_us = (self._build_us_total + self._raster_us_total) / n
        if avg_frame_us > 0:
            self._current_fps = min(max(1_000_000 / avg_frame_us, 0.0), MAX_FPS)

    def _take_snapshot(self) -> None:
        if not self.is_monitoring or not self.enabled:
            return
        snapshot = PerformanceSnapshot(
            timestamp=self._clock(),
            fps=self._current_fps,
            frame_count=len(self._frames),
            avg_build_time=self._avg_build_time,
            avg_raster_time=self._avg_raster_time,
            memory_usage_mb=self._probe_memory(),
            rebuild_count=self._rebuild_count,
        )
        self._snapshots.append(snapshot)
        self._rebuild_count = 0
        self.notifier.bump()

    def _probe_memory(self) -> int:
        try:
            return max(int(self._memory_probe()), 0)
        except (OSError, ValueError) as exc:
            logger.debug("Memory probe failed: %s", exc)
            return 0

    # -- queries --

    @property
    def current_fps(self) -> float:
        return self._current_fps

    @property
    def avg_build_time(self) -> timedelta:
        return self._avg_build_time

    @property
    def avg_raster_time(self) -> timedelta:
        return self._avg_raster_time

    @property
    def jank_frame_count(self) -> int:
        """Jank frames seen since start or the last clear()."""
        return self._jank_frame_count

    @property
    def rebuild_count(self) -> int:
        return self._rebuild_count

    @property
    def frame_samples(self) -> list[FrameSample]:
        """Current window, oldest first."""
        return list(self._frames.snapshot())

    @property
    def snapshots(self) -> list[PerformanceSnapshot]:
        """Snapshot history, oldest first."""
        return list(self._snapshots.snapshot())

    @property
    def jank_percentage(self) -> float:
        n = len(self._frames)
        if n == 0:
            return 0.0
        return self._window_jank / n * 100

    @property
    def fps_status(self) -> FpsStatus:
        return FpsStatus.classify(self._current_fps)

    # -- maintenance and export --

    def clear(self) -> None:
        """Drop all samples and snapshots without changing state."""
        self._frames.clear()
        self._snapshots.clear()
        self._reset_aggregates()
        self.notifier.bump()

    def report(self) -> PerformanceReport:
        return PerformanceReport(
            current_fps=self._current_fps,
            avg_build_time=self._avg_build_time,
            avg_raster_time=self._avg_raster_time,
            jank_frame_count=self._jank_frame_count,
            jank_percentage=self.jank_percentage,
            fps_status=self.fps_status,
            snapshots=self.snapshots,
        )

    def export_structured(self) -> str:
        return json.dumps(self.report().model_dump(mode="json"), indent=2)

    def export_flattened(self) -> str:
        """Summary line followed by one line per snapshot, oldest first."""
        summary = (
            f"fps={self._current_fps:.1f} status={self.fps_status.value} "
            f"jank={self._jank_frame_count} ({self.jank_percentage:.1f}%) "
            f"build={self._avg_build_time.total_seconds() * 1000:.2f}ms "
            f"raster={self._avg_raster_time.total_seconds() * 1000:.2f}ms"
        )
        return "\n".join([summary, *(s.formatted for s in self._snapshots)])
