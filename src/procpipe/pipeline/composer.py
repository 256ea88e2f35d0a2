"""Compose stages into a pipeline, shell-pipe style.

Each stage receives the previous stage's output as its input. Data passes
through this process's memory between stages; there is no fd-to-fd splicing
between children.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Any

from procpipe.errors import NonZeroExitError, StageExecutionError
from procpipe.models.stage import (
    Command,
    OutputMode,
    PipelineState,
    StageResult,
    StageSpec,
    as_stage,
)
from procpipe.runtime.stage_runner import StageRunner, get_stage_runner

logger = logging.getLogger(__name__)

_RAW_INPUT_TYPES = (bytes, bytearray, memoryview, str)


@dataclass(frozen=True, slots=True)
class PipelineCall:
    """Arguments of one ``compose`` call, split into their roles."""

    initial_input: Any
    stages: tuple[StageSpec, ...]
    mode: OutputMode = OutputMode.DEFAULT


def _is_raw_input(value: Any) -> bool:
    return isinstance(value, _RAW_INPUT_TYPES) and not isinstance(value, OutputMode)


def split_arguments(args: Sequence[Any]) -> PipelineCall:
    """Separate leading input, stage specs and trailing output mode."""
    items = list(args)

    initial_input = None
    if items and _is_raw_input(items[0]):
        initial_input = items.pop(0)

    mode = OutputMode.DEFAULT
    if items and isinstance(items[-1], OutputMode):
        mode = items.pop()

    return PipelineCall(
        initial_input=initial_input,
        stages=tuple(as_stage(item) for item in items),
        mode=mode,
    )


def run_stages(
    stages: Iterable[StageSpec],
    initial_input: Any = None,
    *,
    runner: StageRunner | None = None,
    check: bool = False,
) -> PipelineState:
    """Run stages in order, threading each output into the next stage.

    The first failure aborts the pipeline; no partial state is returned.

    Args:
        stages: Stage specifications in execution order.
        initial_input: Output of the virtual zeroth stage.
        runner: Stage runner to use (default: shared runner).
        check: Raise ``NonZeroExitError`` when a command exits non-zero.
            By default the status is only recorded and the pipeline continues.

    Raises:
        StageExecutionError: A command stage could not be run.
    """
    runner = runner or get_stage_runner()
    state = PipelineState.start(initial_input)

    for position, stage in enumerate(stages, start=1):
        try:
            result = runner.run(state.tail.output, stage)
        except StageExecutionError as exc:
            logger.error("Pipeline aborted at stage %d: %s", position, stage.describe())
            if exc.stage_position is None:
                exc.at_stage(position)
            else:
                exc.add_note(f"in pipeline stage {position}: {stage.describe()}")
            raise
        except Exception as exc:
            logger.error(
                "Stage %d (%s) raised %s",
                position,
                stage.describe(),
                type(exc).__name__,
            )
            exc.pipeline_stage = position  # type: ignore[attr-defined]
            exc.add_note(f"in pipeline stage {position}: {stage.describe()}")
            raise

        if check and isinstance(stage, Command) and not result.succeeded:
            logger.error(
                "Pipeline aborted at stage %d: %s exited with %s",
                position,
                stage.describe(),
                result.exit_status,
            )
            raise NonZeroExitError(
                stage.program,
                stage.args,
                result.exit_status,
                stderr=result.error or b"",
                stage_position=position,
            )
        if not result.succeeded:
            logger.warning(
                "Stage %d (%s) exited with %s, continuing",
                position,
                stage.describe(),
                result.exit_status,
            )

        state = state.append(result)

    logger.debug("Pipeline finished after %d stage(s)", len(state.history))
    return state


def select_output(state: PipelineState, mode: OutputMode) -> Any:
    """Shape the pipeline's return value according to ``mode``."""
    if mode is OutputMode.FULL:
        return state
    if mode is OutputMode.LAST:
        return state.tail
    return state.tail.output


def compose(
    *args: Any,
    runner: StageRunner | None = None,
    check: bool = False,
) -> PipelineState | StageResult | Any:
    """Run a pipeline of commands and callables.

    Accepts an optional leading ``bytes``/``str`` input, then stage
    specifications (a list/tuple of strings for an external command, or a
    one-argument callable), then an optional trailing ``OutputMode``::

        compose(["echo", "hello"], ["cat"])             # b"hello\\n"
        compose("b\\na\\n", ["sort"], bytes.upper, LAST)  # StageResult
        compose(["ls"], ["wc", "-l"], FULL)             # PipelineState

    A callable stage may itself call ``compose``, so pipelines nest.
    """
    call = split_arguments(args)
    state = run_stages(
        call.stages,
        call.initial_input,
        runner=runner,
        check=check,
    )
    return select_output(state, call.mode)
