from __future__ import annotations

import copy
from collections.abc import Iterator

import pytest

from procpipe.config.settings import settings


@pytest.fixture(autouse=True)
def isolate_settings(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Prevent tests from reading or persisting user settings."""
    original_data = copy.deepcopy(settings._data)

    def _noop_save() -> None:
        return None

    monkeypatch.setattr(settings, "_save", _noop_save)
    settings._data = {}
    try:
        yield
    finally:
        settings._data = original_data
