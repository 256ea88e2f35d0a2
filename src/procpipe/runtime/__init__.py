"""Runtime primitives for executing pipeline stages."""

from procpipe.runtime.stage_runner import (
    StageRunner,
    get_stage_runner,
    spawn_process,
)

__all__ = [
    "StageRunner",
    "get_stage_runner",
    "spawn_process",
]
