"""Configuration model for DevScope.

Captures devscope.yaml fields with defaults matching the built-in
recorder settings: capacities, the global switch, and redacted headers.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field

from devscope.core.redaction import DEFAULT_REDACTED_HEADERS

CONFIG_FILENAME = "devscope.yaml"


class DevScopeConfig(BaseModel):
    """Recorder configuration loaded from devscope.yaml."""

    model_config = {"extra": "forbid"}

    enabled: bool = True
    max_network_records: int = Field(default=100, ge=1)
    max_log_records: int = Field(default=500, ge=1)
    max_frame_samples: int = Field(default=120, ge=2)
    max_snapshots: int = Field(default=60, ge=1)
    redacted_headers: list[str] = Field(
        default_factory=lambda: list(DEFAULT_REDACTED_HEADERS)
    )
    echo_logs: bool = True


def find_config_file(start: Path | None = None) -> Path | None:
    """Locate the devscope.yaml governing start (default: cwd).

    Checks start and each of its parents; a file path starts the search
    at its directory.

    Returns:
        Path to the nearest devscope.yaml, or None if no ancestor has one.
    """
    current = (start or Path.cwd()).resolve()
    if current.is_file():
        current = current.parent
    for directory in (current, *current.parents):
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
    return None


def load_config(source: Path | None = None) -> DevScopeConfig:
    """Load DevScopeConfig, falling back to defaults when no file applies.

    Args:
        source: A devscope.yaml path, or a directory to search upward
            from. None searches upward from cwd.

    Returns:
        Validated DevScopeConfig instance.

    Raises:
        yaml.YAMLError: If the file is not valid YAML.
        pydantic.ValidationError: If the file is not a mapping, or holds
            unknown keys or out-of-range values.
    """
    config_path = _resolve_config_path(source)
    if config_path is None:
        return DevScopeConfig()
    import yaml

    raw = yaml.safe_load(config_path.read_text(encoding="utf-8"))
    if raw is None:
        return DevScopeConfig()
    return DevScopeConfig.model_validate(raw)


def _resolve_config_path(source: Path | None) -> Path | None:
    if source is not None and source.suffix in (".yaml", ".yml"):
        return source if source.is_file() else None
    return find_config_file(source)
