"""procpipe - compose external commands and Python callables into pipelines."""

from procpipe.errors import (
    NonZeroExitError,
    PipelineError,
    PipelineFileError,
    SpawnError,
    StageExecutionError,
    StreamIOError,
)
from procpipe.models.stage import (
    FULL,
    LAST,
    Command,
    OutputMode,
    PipelineState,
    StageResult,
    StageSpec,
    Transform,
)
from procpipe.pipeline.composer import compose
from procpipe.runtime.stage_runner import StageRunner

__all__ = [
    "FULL",
    "LAST",
    "Command",
    "NonZeroExitError",
    "OutputMode",
    "PipelineError",
    "PipelineFileError",
    "PipelineState",
    "SpawnError",
    "StageExecutionError",
    "StageResult",
    "StageSpec",
    "StageRunner",
    "StreamIOError",
    "Transform",
    "compose",
]
