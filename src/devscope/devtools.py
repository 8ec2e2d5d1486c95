"""DevTools composition root.

Owns one NetworkRecorder, LogRecorder, and PerformanceSampler built
from a single DevScopeConfig. Applications construct it explicitly;
install() additionally registers it behind get_devtools() for call
sites that cannot receive it by injection.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from devscope.logs.recorder import LogRecorder
from devscope.models.config import DevScopeConfig, load_config
from devscope.network.recorder import NetworkRecorder
from devscope.performance.sampler import PerformanceSampler
from devscope.performance.sources import FrameTimingSource, TimerFactory, asyncio_timer

EXPORT_SCHEMA_VERSION = 1


class DevTools:
    """The three recorders plus the configuration that drives them."""

    def __init__(
        self,
        config: DevScopeConfig | None = None,
        frame_source: FrameTimingSource | None = None,
        timer_factory: TimerFactory = asyncio_timer,
    ) -> None:
        self._config = config or DevScopeConfig()
        self.network = NetworkRecorder(
            max_records=self._config.max_network_records,
            redacted_headers=self._config.redacted_headers,
            enabled=self._config.enabled,
        )
        self.console = LogRecorder(
            max_records=self._config.max_log_records,
            enabled=self._config.enabled,
            echo=self._config.echo_logs,
        )
        self.performance = PerformanceSampler(
            frame_source=frame_source,
            timer_factory=timer_factory,
            max_frame_samples=self._config.max_frame_samples,
            max_snapshots=self._config.max_snapshots,
            enabled=self._config.enabled,
        )

    @classmethod
    def from_project(cls, project_root: Path | None = None, **kwargs: Any) -> DevTools:
        """Build DevTools from devscope.yaml (defaults when absent)."""
        return cls(load_config(project_root), **kwargs)

    @property
    def config(self) -> DevScopeConfig:
        return self._config

    @property
    def enabled(self) -> bool:
        return self._config.enabled

    @enabled.setter
    def enabled(self, value: bool) -> None:
        self.apply_config(self._config.model_copy(update={"enabled": value}))

    def apply_config(self, config: DevScopeConfig) -> None:
        """Push a new configuration into every recorder."""
        self._config = config
        for recorder in (self.network, self.console, self.performance):
            recorder.enabled = config.enabled
        self.network.max_records = config.max_network_records
        self.network.redacted_headers = config.redacted_headers
        self.console.max_records = config.max_log_records
        self.console.echo = config.echo_logs
        self.performance.max_frame_samples = config.max_frame_samples
        self.performance.max_snapshots = config.max_snapshots

    def clear_all(self) -> None:
        self.network.clear()
        self.console.clear()
        self.performance.clear()

    def export_all(self) -> str:
        """One JSON document bundling all three structured exports."""
        document = {
            "schema_version": EXPORT_SCHEMA_VERSION,
            "network": json.loads(self.network.export_structured()),
            "logs": json.loads(self.console.export_structured()),
            "performance": json.loads(self.performance.export_structured()),
        }
        return json.dumps(document, indent=2, ensure_ascii=False)

    def close(self) -> None:
        """Stop sampling; recorded data stays readable."""
        self.performance.stop()


_installed: DevTools | None = None


def install(devtools: DevTools) -> DevTools:
    """Register devtools as the instance returned by get_devtools()."""
    global _installed
    _installed = devtools
    return devtools


def uninstall() -> None:
    """Close and unregister the installed instance, if any."""
    global _installed
    if _installed is not None:
        _installed.close()
    _installed = None


def get_devtools() -> DevTools:
    """Return the installed DevTools.

    Raises:
        RuntimeError: If install() has not been called.
    """
    if _installed is None:
        raise RuntimeError("DevTools is not installed; call devscope.install() first")
    return _installed
