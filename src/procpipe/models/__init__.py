"""Data models for procpipe."""

from procpipe.models.stage import (
    FULL,
    LAST,
    Command,
    OutputMode,
    PipelineState,
    StageResult,
    StageSpec,
    Transform,
    as_stage,
)

__all__ = [
    "FULL",
    "LAST",
    "Command",
    "OutputMode",
    "PipelineState",
    "StageResult",
    "StageSpec",
    "Transform",
    "as_stage",
]
