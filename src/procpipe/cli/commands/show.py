"""Show command for inspecting pipeline files."""

from __future__ import annotations

import argparse
import sys

from rich.console import Console

from procpipe.cli.render import build_stages_table
from procpipe.errors import PipelineFileError
from procpipe.pipeline.definition import load_definition


def cmd_show(args: argparse.Namespace) -> int:
    """Show the stages of a pipeline file."""
    try:
        definition = load_definition(args.file)
    except PipelineFileError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    console = Console()
    console.print(build_stages_table(definition.stages, title=str(args.file)))
    if definition.initial_input is not None:
        console.print(f"input: {len(definition.initial_input)} chars", markup=False)
    if definition.mode is not None:
        console.print(f"mode: {definition.mode.value}", markup=False)
    if definition.check is not None:
        console.print(f"check: {str(definition.check).lower()}", markup=False)
    return 0
