"""Run command for executing pipelines from the command line."""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Any

from rich.console import Console

from procpipe.cli.render import as_bytes, build_results_table
from procpipe.config.settings import settings
from procpipe.errors import NonZeroExitError, PipelineError
from procpipe.models.stage import Command, OutputMode
from procpipe.pipeline.composer import run_stages
from procpipe.pipeline.definition import PipelineDefinition, load_definition
from procpipe.runtime.stage_runner import StageRunner

logger = logging.getLogger(__name__)


def _read_input(
    args: argparse.Namespace, definition: PipelineDefinition | None
) -> Any:
    if args.input is not None:
        return args.input
    if args.input_file is not None:
        if str(args.input_file) == "-":
            return sys.stdin.buffer.read()
        return args.input_file.read_bytes()
    if definition is not None:
        return definition.initial_input
    return None


def _write_binary(stream: Any, data: bytes) -> None:
    stream.flush()
    stream.buffer.write(data)
    stream.buffer.flush()


def cmd_run(args: argparse.Namespace) -> int:
    """Run a pipeline given on the command line or in a YAML file."""
    definition = None
    try:
        if args.file is not None:
            definition = load_definition(args.file)
        stages = list(definition.stages) if definition else []
        stages.extend(Command.parse(text) for text in args.stages)
        initial_input = _read_input(args, definition)
    except (PipelineError, OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if not stages:
        print("Error: no stages given", file=sys.stderr)
        return 1

    if args.mode is not None:
        mode = OutputMode.parse(args.mode)
    elif definition is not None and definition.mode is not None:
        mode = definition.mode
    else:
        mode = settings.default_mode

    if args.check:
        check = True
    elif definition is not None and definition.check is not None:
        check = definition.check
    else:
        check = settings.check_exit

    runner = StageRunner(encoding=settings.encoding)
    logger.info("Running %d stage(s) in %s mode", len(stages), mode.value)
    try:
        state = run_stages(stages, initial_input, runner=runner, check=check)
    except NonZeroExitError as e:
        print(f"Error: {e}", file=sys.stderr)
        return e.exit_status if e.exit_status > 0 else 1
    except PipelineError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if mode is OutputMode.DEFAULT:
        for result in state.history:
            if result.error:
                _write_binary(sys.stderr, result.error)
        _write_binary(sys.stdout, as_bytes(state.tail.output, runner.encoding))
    else:
        console = Console()
        if mode is OutputMode.FULL:
            table = build_results_table(stages, state.history, title="Pipeline")
        else:
            table = build_results_table(
                stages[-1:],
                state.history[-1:],
                first_position=len(stages),
                title="Last stage",
            )
        console.print(table)
        console.print(
            as_bytes(state.tail.output, runner.encoding).decode(
                runner.encoding, errors="replace"
            ),
            markup=False,
            highlight=False,
            soft_wrap=True,
            end="",
        )

    status = state.tail.exit_status or 0
    return status if status >= 0 else 1
