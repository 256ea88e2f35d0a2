"""Exceptions raised while running pipelines."""

from __future__ import annotations

import shlex
from collections.abc import Sequence
from pathlib import Path


class PipelineError(Exception):
    """Base exception for pipeline failures."""

    pass


class StageExecutionError(PipelineError):
    """A command stage could not be run to completion.

    Carries the offending program, its arguments and whatever stderr had
    been captured when the failure happened (possibly incomplete).
    """

    def __init__(
        self,
        program: str,
        args: Sequence[str],
        *,
        stderr: bytes = b"",
        cause: BaseException | None = None,
        stage_position: int | None = None,
        detail: str | None = None,
    ) -> None:
        self.program = program
        self.args_list = tuple(args)
        self.stderr = stderr
        self.cause = cause
        self.stage_position = stage_position
        self.detail = detail
        super().__init__(self._format())

    def _format(self) -> str:
        reason = self.detail or (str(self.cause) if self.cause else "unknown error")
        lines = [
            f"{reason} (program: {self.program}, "
            f"args: {shlex.join(self.args_list)!r})"
        ]
        if self.stage_position is not None:
            lines[0] = f"Stage {self.stage_position}: " + lines[0]
        stderr_text = self.stderr.decode(errors="replace").strip()
        if stderr_text:
            lines.append(f"stderr: {stderr_text}")
        return "\n".join(lines)

    @property
    def command_line(self) -> str:
        return shlex.join((self.program, *self.args_list))

    def at_stage(self, position: int) -> StageExecutionError:
        """Record the pipeline position of the failing stage."""
        self.stage_position = position
        self.args = (self._format(),)
        return self


class SpawnError(StageExecutionError):
    """The child process could not be created."""

    pass


class StreamIOError(StageExecutionError):
    """Writing to or reading from a running child process failed."""

    pass


class NonZeroExitError(StageExecutionError):
    """A command stage exited with a non-zero status under ``check=True``."""

    def __init__(
        self,
        program: str,
        args: Sequence[str],
        exit_status: int,
        *,
        stderr: bytes = b"",
        stage_position: int | None = None,
    ) -> None:
        self.exit_status = exit_status
        super().__init__(
            program,
            args,
            stderr=stderr,
            stage_position=stage_position,
            detail=f"Command exited with status {exit_status}",
        )


class PipelineFileError(PipelineError):
    """Raised when a pipeline definition file is invalid."""

    def __init__(self, path: Path, message: str) -> None:
        self.path = path
        super().__init__(f"Invalid pipeline file {path}: {message}")
