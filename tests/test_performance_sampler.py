"""Tests for PerformanceSampler state machine, aggregates, and snapshots."""

from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone

import pytest

from devscope.performance.models import FpsStatus, FrameSample, FrameTiming
from devscope.performance.sampler import DEFAULT_FPS, PerformanceSampler, SamplerState
from devscope.performance.sources import ManualFrameSource


def ms(value: float) -> timedelta:
    return timedelta(milliseconds=value)


def frame(build: float, raster: float) -> FrameTiming:
    return FrameTiming(build_duration=ms(build), raster_duration=ms(raster))


class FakeTimer:
    """Stands in for the periodic timer; tests fire it by hand."""

    def __init__(self, period: float, callback) -> None:
        self.period = period
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True

    def fire(self) -> None:
        if not self.cancelled:
            self.callback()


class TimerFactory:
    def __init__(self) -> None:
        self.timers: list[FakeTimer] = []

    def __call__(self, period, callback) -> FakeTimer:
        timer = FakeTimer(period, callback)
        self.timers.append(timer)
        return timer

    @property
    def last(self) -> FakeTimer:
        return self.timers[-1]


@pytest.fixture
def timers() -> TimerFactory:
    return TimerFactory()


@pytest.fixture
def source() -> ManualFrameSource:
    return ManualFrameSource()


@pytest.fixture
def sampler(source, timers) -> PerformanceSampler:
    return PerformanceSampler(
        frame_source=source,
        timer_factory=timers,
        clock=lambda: datetime(2026, 1, 1, tzinfo=timezone.utc),
        memory_probe=lambda: 128,
    )


def _state(s: PerformanceSampler) -> tuple:
    return (
        s.state,
        s.notifier.version,
        s.current_fps,
        s.jank_frame_count,
        s.rebuild_count,
        len(s.frame_samples),
        len(s.snapshots),
    )


class TestFrameSample:
    def test_jank_classification(self):
        assert FrameSample(build_duration=ms(10), raster_duration=ms(8)).is_jank
        assert not FrameSample(build_duration=ms(8), raster_duration=ms(8)).is_jank

    def test_total_duration(self):
        sample = FrameSample(build_duration=ms(3), raster_duration=ms(4))
        assert sample.total_duration == ms(7)

    def test_exports_microseconds(self):
        sample = FrameSample(build_duration=ms(3), raster_duration=ms(4.5))
        assert sample.model_dump(mode="json") == {
            "build_duration": 3000,
            "raster_duration": 4500,
        }


class TestStateMachine:
    def test_initially_idle(self, sampler, source):
        assert sampler.state is SamplerState.idle
        assert source.subscriber_count == 0

    def test_start_subscribes_and_arms_timer(self, sampler, source, timers):
        sampler.start()
        assert sampler.is_monitoring
        assert source.subscriber_count == 1
        assert timers.last.period == 1.0

    def test_start_twice_is_noop(self, sampler, source, timers):
        sampler.start()
        before = _state(sampler)
        sampler.start()
        assert _state(sampler) == before
        assert source.subscriber_count == 1
        assert len(timers.timers) == 1

    def test_stop_when_idle_is_noop(self, sampler):
        before = _state(sampler)
        sampler.stop()
        assert _state(sampler) == before

    def test_stop_unsubscribes_and_disarms(self, sampler, source, timers):
        sampler.start()
        sampler.stop()
        assert sampler.state is SamplerState.idle
        assert source.subscriber_count == 0
        assert timers.last.cancelled

    def test_disabled_start_is_noop(self, source, timers):
        sampler = PerformanceSampler(frame_source=source, timer_factory=timers, enabled=False)
        sampler.start()
        assert sampler.state is SamplerState.idle
        assert timers.timers == []

    def test_missing_event_loop_still_monitors(self, source, caplog):
        def no_loop(period, callback):
            raise RuntimeError("no running event loop")

        sampler = PerformanceSampler(frame_source=source, timer_factory=no_loop)
        sampler.start()
        assert sampler.is_monitoring
        assert "snapshots are disabled" in caplog.text
        sampler.stop()


class TestFrameAggregates:
    def test_two_ten_ms_frames_give_100_fps(self, sampler, source):
        sampler.start()
        source.push([frame(5, 5), frame(5, 5)])
        assert sampler.current_fps == pytest.approx(100.0)
        assert sampler.avg_build_time == ms(5)
        assert sampler.avg_raster_time == ms(5)

    def test_single_sample_skips_recompute(self, sampler, source):
        sampler.start()
        source.push([FrameTiming(timedelta(microseconds=1), timedelta(0))])
        assert sampler.current_fps == DEFAULT_FPS
        assert sampler.avg_build_time == timedelta(0)

    def test_fps_clamped_to_120(self, sampler, source):
        sampler.start()
        source.push([frame(1, 1), frame(1, 1)])
        assert sampler.current_fps == 120.0

    def test_slow_frames(self, sampler, source):
        sampler.start()
        source.push([frame(30, 20), frame(30, 20)])
        assert sampler.current_fps == pytest.approx(20.0)
        assert sampler.fps_status is FpsStatus.bad

    def test_averages_cover_window_only(self, source, timers):
        sampler = PerformanceSampler(frame_source=source, timer_factory=timers, max_frame_samples=2)
        sampler.start()
        source.push([frame(40, 40), frame(40, 40)])
        source.push([frame(5, 5), frame(5, 5)])
        assert len(sampler.frame_samples) == 2
        assert sampler.avg_build_time == ms(5)
        assert sampler.current_fps == pytest.approx(100.0)

    def test_jank_counts_and_percentage(self, sampler, source):
        sampler.start()
        source.push([frame(10, 8), frame(8, 8), frame(8, 8), frame(20, 0)])
        assert sampler.jank_frame_count == 2
        assert sampler.jank_percentage == pytest.approx(50.0)

    def test_jank_percentage_tracks_window_not_total(self, source, timers):
        sampler = PerformanceSampler(frame_source=source, timer_factory=timers, max_frame_samples=2)
        sampler.start()
        source.push([frame(20, 0), frame(20, 0), frame(1, 1), frame(1, 1)])
        assert sampler.jank_frame_count == 2
        assert sampler.jank_percentage == 0.0

    def test_jank_percentage_empty_window(self, sampler):
        assert sampler.jank_percentage == 0.0

    def test_frames_ignored_when_idle(self, sampler, source):
        callback = sampler._on_frame_timings
        source.add_timings_callback(callback)
        source.push([frame(5, 5), frame(5, 5)])
        assert sampler.frame_samples == []

    def test_notifier_bumped_per_batch(self, sampler, source):
        sampler.start()
        version = sampler.notifier.version
        source.push([frame(5, 5), frame(5, 5), frame(5, 5)])
        assert sampler.notifier.version == version + 1

    def test_shrinking_window_recomputes(self, source, timers):
        sampler = PerformanceSampler(frame_source=source, timer_factory=timers, max_frame_samples=4)
        sampler.start()
        source.push([frame(40, 40), frame(40, 40), frame(5, 5), frame(5, 5)])
        sampler.max_frame_samples = 2
        assert sampler.current_fps == pytest.approx(100.0)


class TestFpsStatus:
    @pytest.mark.parametrize(
        ("fps", "expected"),
        [(60.0, FpsStatus.good), (55.0, FpsStatus.good), (54.9, FpsStatus.ok),
         (30.0, FpsStatus.ok), (29.9, FpsStatus.bad)],
    )
    def test_thresholds(self, fps, expected):
        assert FpsStatus.classify(fps) is expected


class TestSnapshots:
    def test_tick_captures_snapshot_and_resets_rebuilds(self, sampler, source, timers):
        sampler.start()
        source.push([frame(5, 5), frame(5, 5)])
        sampler.track_rebuild()
        sampler.track_rebuild()
        timers.last.fire()

        snap = sampler.snapshots[0]
        assert snap.fps == pytest.approx(100.0)
        assert snap.frame_count == 2
        assert snap.avg_build_time == ms(5)
        assert snap.memory_usage_mb == 128
        assert snap.rebuild_count == 2
        assert sampler.rebuild_count == 0

        timers.last.fire()
        assert sampler.snapshots[1].rebuild_count == 0

    def test_no_snapshots_after_stop(self, sampler, timers):
        sampler.start()
        timer = timers.last
        sampler.stop()
        timer.callback()
        assert sampler.snapshots == []

    def test_history_bounded(self, source, timers):
        sampler = PerformanceSampler(frame_source=source, timer_factory=timers, max_snapshots=3,
                                     memory_probe=lambda: 0)
        sampler.start()
        for _ in range(5):
            timers.last.fire()
        assert len(sampler.snapshots) == 3

    def test_memory_probe_failure_reports_zero(self, source, timers):
        def broken() -> int:
            raise OSError("unavailable")

        sampler = PerformanceSampler(frame_source=source, timer_factory=timers, memory_probe=broken)
        sampler.start()
        timers.last.fire()
        assert sampler.snapshots[0].memory_usage_mb == 0

    def test_rebuilds_ignored_when_idle(self, sampler):
        sampler.track_rebuild()
        assert sampler.rebuild_count == 0

    def test_reset_rebuild_counter(self, sampler):
        sampler.start()
        sampler.track_rebuild()
        sampler.reset_rebuild_counter()
        assert sampler.rebuild_count == 0


class TestClear:
    def test_clear_resets_everything_but_state(self, sampler, source, timers):
        sampler.start()
        source.push([frame(10, 10), frame(10, 10)])
        sampler.track_rebuild()
        timers.last.fire()

        sampler.clear()
        assert sampler.is_monitoring
        assert sampler.frame_samples == []
        assert sampler.snapshots == []
        assert sampler.jank_frame_count == 0
        assert sampler.rebuild_count == 0
        assert sampler.current_fps == DEFAULT_FPS
        assert sampler.avg_build_time == timedelta(0)

    def test_clear_twice_identical(self, sampler, source):
        sampler.start()
        source.push([frame(10, 10), frame(10, 10)])
        sampler.clear()
        first = _state(sampler)[2:]
        sampler.clear()
        assert _state(sampler)[2:] == first

    def test_window_sums_reset_after_clear(self, sampler, source):
        sampler.start()
        source.push([frame(40, 40), frame(40, 40)])
        sampler.clear()
        source.push([frame(5, 5), frame(5, 5)])
        assert sampler.current_fps == pytest.approx(100.0)


class TestExport:
    def test_structured(self, sampler, source, timers):
        sampler.start()
        source.push([frame(5, 5), frame(5, 5)])
        timers.last.fire()
        data = json.loads(sampler.export_structured())
        assert data["current_fps"] == pytest.approx(100.0)
        assert data["avg_build_time"] == 5000
        assert data["fps_status"] == "good"
        assert data["jank_frame_count"] == 0
        assert data["snapshots"][0]["rebuild_count"] == 0
        assert data["snapshots"][0]["avg_raster_time"] == 5000

    def test_flattened(self, sampler, source, timers):
        sampler.start()
        timers.last.fire()
        timers.last.fire()
        lines = sampler.export_flattened().split("\n")
        assert len(lines) == 3
        assert lines[0].startswith("fps=60.0 status=good")
        assert "memory=128MB" in lines[1]
