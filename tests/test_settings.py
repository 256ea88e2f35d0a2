from __future__ import annotations

import importlib
import json
from pathlib import Path

import pytest

from procpipe.config.paths import ProcpipePaths, get_paths, reset_paths
from procpipe.config.settings import Settings, settings
from procpipe.models.stage import OutputMode


def test_settings_do_not_write_to_disk(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    settings_path = tmp_path / "settings.json"
    settings_module = importlib.import_module("procpipe.config.settings")
    monkeypatch.setattr(settings_module, "get_settings_path", lambda: settings_path)

    settings.encoding = "latin-1"

    assert settings.get("encoding") == "latin-1"
    assert not settings_path.exists()


def test_defaults() -> None:
    assert settings.encoding == "utf-8"
    assert settings.default_mode is OutputMode.DEFAULT
    assert settings.check_exit is False


def test_invalid_values_fall_back_to_defaults() -> None:
    settings._data = {"encoding": "no-such-codec", "default_mode": "everything"}

    assert settings.encoding == "utf-8"
    assert settings.default_mode is OutputMode.DEFAULT


def test_setters_validate() -> None:
    with pytest.raises(LookupError):
        settings.encoding = "no-such-codec"
    with pytest.raises(ValueError):
        settings.default_mode = "everything"

    settings.default_mode = ":full"
    settings.check_exit = True

    assert settings.get("default_mode") == "full"
    assert settings.default_mode is OutputMode.FULL
    assert settings.check_exit is True


def test_settings_load_from_disk(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    settings_path = tmp_path / "settings.json"
    settings_path.write_text(
        json.dumps({"default_mode": "last", "check_exit": True}), encoding="utf-8"
    )
    settings_module = importlib.import_module("procpipe.config.settings")
    monkeypatch.setattr(settings_module, "get_settings_path", lambda: settings_path)

    loaded = Settings()

    assert loaded.default_mode is OutputMode.LAST
    assert loaded.check_exit is True


def test_settings_ignore_corrupt_file(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    settings_path = tmp_path / "settings.json"
    settings_path.write_text("{not-json", encoding="utf-8")
    settings_module = importlib.import_module("procpipe.config.settings")
    monkeypatch.setattr(settings_module, "get_settings_path", lambda: settings_path)

    assert Settings().get("encoding") == "utf-8"


def test_paths_follow_xdg(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_STATE_HOME", str(tmp_path / "state"))
    reset_paths()
    try:
        paths = get_paths()
        assert isinstance(paths, ProcpipePaths)
        config_dir = tmp_path / "config" / "procpipe"
        assert paths.global_settings == config_dir / "settings.json"
        assert paths.debug_log == tmp_path / "state" / "procpipe" / "debug.log"

        paths.ensure_global_dirs()
        assert paths.global_state_dir.is_dir()
    finally:
        reset_paths()
