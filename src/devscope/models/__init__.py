"""DevScope data models - re-exports configuration classes."""

from devscope.models.config import DevScopeConfig, find_config_file, load_config

__all__ = [
    "DevScopeConfig",
    "find_config_file",
    "load_config",
]
