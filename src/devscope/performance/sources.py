"""Frame-timing sources and the periodic snapshot timer.

The sampler depends only on the FrameTimingSource and TimerFactory
shapes defined here; hosts plug in their own renderer hooks, and the
default timer runs on the current asyncio event loop.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Sequence
from typing import Protocol, runtime_checkable

from devscope.performance.models import FrameTiming

TimingsCallback = Callable[[Sequence[FrameTiming]], None]


@runtime_checkable
class FrameTimingSource(Protocol):
    """Something that reports batches of frame timings to callbacks."""

    def add_timings_callback(self, callback: TimingsCallback) -> None: ...

    def remove_timings_callback(self, callback: TimingsCallback) -> None: ...


class Cancellable(Protocol):
    def cancel(self) -> None: ...


# (period_seconds, callback) -> handle; may raise RuntimeError when no
# scheduler is available.
TimerFactory = Callable[[float, Callable[[], None]], Cancellable]


class ManualFrameSource:
    """Frame source fed explicitly by the host's render loop."""

    def __init__(self) -> None:
        self._callbacks: list[TimingsCallback] = []

    def add_timings_callback(self, callback: TimingsCallback) -> None:
        self._callbacks.append(callback)

    def remove_timings_callback(self, callback: TimingsCallback) -> None:
        if callback in self._callbacks:
            self._callbacks.remove(callback)

    @property
    def subscriber_count(self) -> int:
        return len(self._callbacks)

    def push(self, timings: Sequence[FrameTiming]) -> None:
        """Deliver a batch of frame timings to every subscriber."""
        batch = list(timings)
        for callback in list(self._callbacks):
            callback(batch)


class PeriodicTimer:
    """Re-arming asyncio timer that calls callback every period seconds."""

    def __init__(
        self,
        loop: asyncio.AbstractEventLoop,
        period: float,
        callback: Callable[[], None],
    ) -> None:
        self._loop = loop
        self._period = period
        self._callback = callback
        self._handle: asyncio.TimerHandle | None = None
        self._cancelled = False

    def start(self) -> None:
        self._handle = self._loop.call_later(self._period, self._fire)

    def cancel(self) -> None:
        self._cancelled = True
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    @property
    def active(self) -> bool:
        return self._handle is not None and not self._cancelled

    def _fire(self) -> None:
        if self._cancelled:
            return
        self._handle = self._loop.call_later(self._period, self._fire)
        self._callback()


def asyncio_timer(period: float, callback: Callable[[], None]) -> PeriodicTimer:
    """Default TimerFactory bound to the running event loop.

    Raises:
        RuntimeError: If called outside a running event loop.
    """
    timer = PeriodicTimer(asyncio.get_running_loop(), period, callback)
    timer.start()
    return timer
