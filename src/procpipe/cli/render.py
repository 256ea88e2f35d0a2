"""Rich rendering of pipeline stages and results."""

from __future__ import annotations

import shlex
from collections.abc import Sequence
from typing import Any

from rich.table import Table
from rich.text import Text

from procpipe.models.stage import Command, StageResult, StageSpec

_PREVIEW_CHARS = 60


def as_bytes(value: Any, encoding: str = "utf-8") -> bytes:
    """Coerce a stage output to bytes for writing to a binary stream."""
    if value is None:
        return b""
    if isinstance(value, str):
        return value.encode(encoding)
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    return str(value).encode(encoding)


def format_size(size: int) -> str:
    if size < 1024:
        return f"{size} B"
    if size < 1024 * 1024:
        return f"{size / 1024:.1f} KiB"
    return f"{size / (1024 * 1024):.1f} MiB"


def preview(value: Any, limit: int = _PREVIEW_CHARS) -> str:
    """First non-empty line of a stage stream, truncated to ``limit``."""
    if value is None:
        return ""
    text = as_bytes(value).decode(errors="replace")
    for line in text.splitlines():
        line = line.strip()
        if line:
            return line if len(line) <= limit else line[: limit - 1] + "…"
    return ""


def _exit_cell(result: StageResult) -> Text:
    if result.exit_status is None:
        return Text("-", style="dim")
    style = "green" if result.exit_status == 0 else "bold red"
    return Text(str(result.exit_status), style=style)


def build_results_table(
    stages: Sequence[StageSpec],
    results: Sequence[StageResult],
    *,
    first_position: int = 1,
    title: str | None = None,
) -> Table:
    """Table with one row per executed stage."""
    table = Table(title=title)
    table.add_column("#", justify="right", style="dim")
    table.add_column("Stage")
    table.add_column("Exit", justify="right")
    table.add_column("Output", justify="right")
    table.add_column("Stderr")

    for offset, (stage, result) in enumerate(zip(stages, results, strict=True)):
        stderr_cell = ""
        if result.error:
            stderr_cell = f"{format_size(len(result.error))}: {preview(result.error)}"
        table.add_row(
            str(first_position + offset),
            stage.describe(),
            _exit_cell(result),
            format_size(len(as_bytes(result.output))),
            stderr_cell,
        )
    return table


def build_stages_table(stages: Sequence[Command], title: str | None = None) -> Table:
    """Table listing the commands of a pipeline without running them."""
    table = Table(title=title)
    table.add_column("#", justify="right", style="dim")
    table.add_column("Program", style="bold")
    table.add_column("Arguments")

    for position, stage in enumerate(stages, start=1):
        table.add_row(str(position), stage.program, shlex.join(stage.args))
    return table
