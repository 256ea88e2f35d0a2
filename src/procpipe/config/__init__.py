"""Configuration management for procpipe."""
from __future__ import annotations

from procpipe.config.paths import ProcpipePaths, get_paths, reset_paths
from procpipe.config.settings import Settings, get_settings_path, settings

__all__ = [
    "ProcpipePaths",
    "Settings",
    "get_paths",
    "get_settings_path",
    "reset_paths",
    "settings",
]
