"""CLI command handlers."""

from .run import cmd_run
from .show import cmd_show

__all__ = [
    "cmd_run",
    "cmd_show",
]
