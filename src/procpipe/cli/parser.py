"""Argument parser construction for procpipe CLI."""

from __future__ import annotations

import argparse
from collections.abc import Sequence
from pathlib import Path

from procpipe.models.stage import OutputMode


def build_parser() -> argparse.ArgumentParser:
    """Build and return the top-level CLI parser."""
    parser = argparse.ArgumentParser(
        description="procpipe - chain commands and transforms like a shell pipe"
    )

    # Subcommands
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Run command
    run_parser = subparsers.add_parser(
        "run",
        help="Run a pipeline of commands",
    )
    run_parser.add_argument(
        "stages",
        nargs="*",
        metavar="STAGE",
        help="Command line for one stage, e.g. 'grep -v foo' (split like a shell)",
    )
    run_parser.add_argument(
        "--file",
        "-f",
        type=Path,
        help="YAML pipeline definition (stages given on the command line are "
        "appended)",
    )
    input_group = run_parser.add_mutually_exclusive_group()
    input_group.add_argument(
        "--input",
        "-i",
        help="Text sent to the first stage's stdin",
    )
    input_group.add_argument(
        "--input-file",
        type=Path,
        help="File whose bytes are sent to the first stage ('-' for stdin)",
    )
    run_parser.add_argument(
        "--mode",
        "-m",
        choices=[mode.value for mode in OutputMode],
        help="What to print: raw output (default), last result, or full history",
    )
    run_parser.add_argument(
        "--check",
        action="store_true",
        help="Abort when a stage exits with a non-zero status",
    )

    # Show command
    show_parser = subparsers.add_parser(
        "show",
        help="Show the stages of a pipeline file without running it",
    )
    show_parser.add_argument(
        "file",
        type=Path,
        help="YAML pipeline definition",
    )

    return parser


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    return build_parser().parse_args(argv)
