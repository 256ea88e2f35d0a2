"""CLI orchestration and command routing."""

from __future__ import annotations

import argparse
import logging
from collections.abc import Callable, Sequence

from procpipe.cli.commands import cmd_run, cmd_show
from procpipe.cli.parser import build_parser, parse_args

logger = logging.getLogger(__name__)


def dispatch(args: argparse.Namespace) -> int:
    """Route parsed args to the correct command handler."""
    command_handlers: dict[str, Callable[[argparse.Namespace], int]] = {
        "run": cmd_run,
        "show": cmd_show,
    }

    handler = command_handlers.get(args.command)
    if handler is None:
        build_parser().print_help()
        return 2

    return handler(args)


def run(
    argv: Sequence[str] | None = None,
    *,
    configure_logging: Callable[[], None] | None = None,
) -> int:
    """Parse args, apply shared CLI setup, and execute command."""
    args = parse_args(argv)

    if configure_logging is not None:
        configure_logging()

    logger.info("Running command: %s", args.command)
    return dispatch(args)
