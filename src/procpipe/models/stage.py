"""Stage specifications, stage results and pipeline state.

A pipeline position is exactly one of two variants:

- ``Command``: an external program followed by its arguments
- ``Transform``: an in-process callable taking one input and returning one output

Both are decided once, when the stage is constructed, so the runner and the
composer match on the variant instead of probing values at run time.
"""

from __future__ import annotations

import shlex
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class OutputMode(str, Enum):
    """What a pipeline invocation returns."""

    DEFAULT = "default"
    LAST = "last"
    FULL = "full"

    @classmethod
    def parse(cls, value: str | OutputMode) -> OutputMode:
        """Resolve a mode from its name, accepting a leading colon."""
        if isinstance(value, OutputMode):
            return value
        normalized = str(value).strip().lower().lstrip(":")
        try:
            return cls(normalized)
        except ValueError:
            choices = ", ".join(mode.value for mode in cls)
            raise ValueError(
                f"Unknown output mode {value!r} (expected one of: {choices})"
            ) from None


LAST = OutputMode.LAST
FULL = OutputMode.FULL


@dataclass(frozen=True, slots=True)
class Command:
    """External program invocation: program name followed by arguments."""

    argv: tuple[str, ...]

    def __post_init__(self) -> None:
        if not self.argv:
            raise ValueError("Command stage requires at least a program name")
        for part in self.argv:
            if not isinstance(part, str):
                raise TypeError(
                    f"Command arguments must be strings, got {type(part).__name__}"
                )

    @classmethod
    def of(cls, parts: Sequence[str]) -> Command:
        """Build a command from any ordered sequence of strings."""
        return cls(tuple(parts))

    @classmethod
    def parse(cls, text: str) -> Command:
        """Split a shell-like command line into a command stage."""
        return cls(tuple(shlex.split(text)))

    @property
    def program(self) -> str:
        return self.argv[0]

    @property
    def args(self) -> tuple[str, ...]:
        return self.argv[1:]

    def describe(self) -> str:
        return shlex.join(self.argv)


@dataclass(frozen=True, slots=True)
class Transform:
    """In-process stage wrapping a single-argument callable."""

    func: Callable[[Any], Any]
    name: str | None = None

    def __post_init__(self) -> None:
        if not callable(self.func):
            raise TypeError(f"Transform requires a callable, got {self.func!r}")

    def describe(self) -> str:
        if self.name:
            return self.name
        return getattr(self.func, "__qualname__", None) or repr(self.func)


StageSpec = Command | Transform


def as_stage(value: Any) -> StageSpec:
    """Convert a raw stage value into its tagged variant.

    Lists and tuples of strings become ``Command`` stages and callables
    become ``Transform`` stages. Existing stage objects pass through.

    Raises:
        TypeError: If the value is neither a command sequence nor callable.
    """
    if isinstance(value, (Command, Transform)):
        return value
    if isinstance(value, (list, tuple)):
        return Command.of(value)
    if callable(value):
        return Transform(value)
    raise TypeError(
        f"Cannot use {type(value).__name__} as a pipeline stage; "
        "expected a command sequence or a callable"
    )


@dataclass(frozen=True, slots=True)
class StageResult:
    """Captured outcome of one stage.

    ``error`` and ``exit_status`` stay ``None`` for transform stages and for
    the synthetic seed result.
    """

    output: Any
    error: bytes | None = None
    exit_status: int | None = None

    @classmethod
    def seed(cls, value: Any = None) -> StageResult:
        """Result of the virtual zeroth stage carrying the initial input."""
        return cls(output=value)

    @property
    def succeeded(self) -> bool:
        return self.exit_status is None or self.exit_status == 0


@dataclass(frozen=True, slots=True)
class PipelineState:
    """History of stage results for one pipeline invocation."""

    tail: StageResult
    history: tuple[StageResult, ...] = field(default=())

    @classmethod
    def start(cls, initial_input: Any = None) -> PipelineState:
        return cls(tail=StageResult.seed(initial_input))

    def append(self, result: StageResult) -> PipelineState:
        """Return a new state with ``result`` recorded as the tail."""
        return PipelineState(tail=result, history=(*self.history, result))
