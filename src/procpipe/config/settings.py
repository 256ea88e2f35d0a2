"""Configuration and settings persistence."""

import codecs
import json
import logging
from pathlib import Path
from typing import Any

from procpipe.config.paths import get_paths
from procpipe.models.stage import OutputMode

logger = logging.getLogger(__name__)


def get_settings_path() -> Path:
    """Get the path to the settings file."""
    return get_paths().global_settings


class Settings:
    """Persistent settings for procpipe."""

    _defaults: dict[str, Any] = {
        "encoding": "utf-8",
        "default_mode": OutputMode.DEFAULT.value,
        "check_exit": False,
    }

    def __init__(self) -> None:
        self._data: dict[str, Any] = {}
        self._load()

    def _load(self) -> None:
        """Load settings from disk."""
        path = get_settings_path()
        if path.exists():
            try:
                self._data = json.loads(path.read_text(encoding="utf-8"))
            except (json.JSONDecodeError, OSError):
                self._data = {}
        else:
            self._data = {}

    def _save(self) -> None:
        """Save settings to disk."""
        path = get_settings_path()
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(json.dumps(self._data, indent=2), encoding="utf-8")
            logger.info("Saved settings to %s: %s", path, self._data)
        except OSError as e:
            logger.error("Failed to save settings: %s", e)

    def get(self, key: str) -> Any:
        """Get a setting value, falling back to default."""
        return self._data.get(key, self._defaults.get(key))

    def set(self, key: str, value: Any) -> None:
        """Set a setting value and persist to disk."""
        self._data[key] = value
        self._save()

    @property
    def encoding(self) -> str:
        """Text encoding used for ``str`` input sent to commands.

        Unknown codecs fall back to utf-8.
        """
        raw = str(self._data.get("encoding") or self._defaults["encoding"])
        try:
            codecs.lookup(raw)
        except LookupError:
            logger.warning("Unknown encoding %r in settings, using utf-8", raw)
            return "utf-8"
        return raw

    @encoding.setter
    def encoding(self, value: str) -> None:
        codecs.lookup(value)
        self.set("encoding", value)

    @property
    def default_mode(self) -> OutputMode:
        """Output mode used by the CLI when none is given."""
        raw = self._data.get("default_mode", self._defaults["default_mode"])
        try:
            return OutputMode.parse(raw)
        except ValueError:
            return OutputMode.DEFAULT

    @default_mode.setter
    def default_mode(self, value: str | OutputMode) -> None:
        self.set("default_mode", OutputMode.parse(value).value)

    @property
    def check_exit(self) -> bool:
        """Whether a non-zero exit status aborts CLI pipelines."""
        return bool(self._data.get("check_exit", self._defaults["check_exit"]))

    @check_exit.setter
    def check_exit(self, value: bool) -> None:
        self.set("check_exit", bool(value))


# Global settings instance
settings = Settings()
