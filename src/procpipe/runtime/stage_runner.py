"""Single-stage execution with concurrent stdin/stdout/stderr handling."""

from __future__ import annotations

import logging
import subprocess
from collections.abc import Callable, Sequence
from concurrent.futures import FIRST_EXCEPTION, Future, ThreadPoolExecutor, wait
from typing import IO, Any

from procpipe.errors import SpawnError, StreamIOError
from procpipe.models.stage import Command, StageResult, StageSpec, Transform

logger = logging.getLogger(__name__)

_CHUNK_SIZE = 64 * 1024

Spawner = Callable[..., "subprocess.Popen[bytes]"]


def spawn_process(
    argv: Sequence[str], *, pipe_stdin: bool
) -> subprocess.Popen[bytes]:
    """Start a child process with piped stdout/stderr.

    Stdin is piped only when there is input to send; otherwise the child
    inherits the caller's stdin.
    """
    return subprocess.Popen(
        list(argv),
        stdin=subprocess.PIPE if pipe_stdin else None,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
    )


class StageRunner:
    """Runs one stage to completion and captures its result."""

    def __init__(
        self,
        *,
        spawner: Spawner = spawn_process,
        encoding: str = "utf-8",
    ) -> None:
        self._spawner = spawner
        self.encoding = encoding

    def run(self, stage_input: Any, stage: StageSpec) -> StageResult:
        """Execute ``stage`` with ``stage_input`` as its input.

        Transform exceptions propagate untouched. Command stages raise
        ``SpawnError`` or ``StreamIOError``; a non-zero exit status is
        returned in the result, not raised.
        """
        if isinstance(stage, Transform):
            return self._run_transform(stage_input, stage)
        if isinstance(stage, Command):
            return self._run_command(stage_input, stage)
        raise TypeError(f"Unsupported stage type: {type(stage).__name__}")

    def _run_transform(self, stage_input: Any, stage: Transform) -> StageResult:
        logger.debug("Running transform stage: %s", stage.describe())
        return StageResult(output=stage.func(stage_input))

    def _run_command(self, stage_input: Any, stage: Command) -> StageResult:
        data = self._encode_input(stage_input)
        command_text = stage.describe()
        logger.debug(
            "Running command stage: %s (stdin: %s)",
            command_text,
            "pipe" if data is not None else "inherit",
        )

        try:
            process = self._spawner(stage.argv, pipe_stdin=data is not None)
        except (OSError, ValueError) as exc:
            logger.error("Failed to start %s: %s", command_text, exc)
            raise SpawnError(stage.program, stage.args, cause=exc) from exc

        stdout = bytearray()
        stderr = bytearray()
        with process:
            try:
                self._exchange(process, data, stdout, stderr)
            except OSError as exc:
                logger.error("I/O failure while running %s: %s", command_text, exc)
                raise StreamIOError(
                    stage.program,
                    stage.args,
                    stderr=bytes(stderr),
                    cause=exc,
                ) from exc
            exit_status = process.wait()

        logger.debug(
            "Command stage finished: %s exit=%d stdout=%d bytes stderr=%d bytes",
            command_text,
            exit_status,
            len(stdout),
            len(stderr),
        )
        return StageResult(
            output=bytes(stdout),
            error=bytes(stderr),
            exit_status=exit_status,
        )

    def _exchange(
        self,
        process: subprocess.Popen[bytes],
        data: bytes | None,
        stdout: bytearray,
        stderr: bytearray,
    ) -> None:
        """Feed stdin and drain both output pipes in parallel.

        All three transfers are joined before returning. When one of them
        fails the child is killed so the remaining transfers reach EOF, and
        the first failure (stdin, then stdout, then stderr) is re-raised.
        """
        futures: list[Future[None]] = []
        with ThreadPoolExecutor(
            max_workers=3, thread_name_prefix="procpipe-io"
        ) as pool:
            if data is not None and process.stdin is not None:
                futures.append(pool.submit(_feed, process.stdin, data))
            futures.append(pool.submit(_drain, process.stdout, stdout))
            futures.append(pool.submit(_drain, process.stderr, stderr))
            done, _ = wait(futures, return_when=FIRST_EXCEPTION)
            if any(future.exception() is not None for future in done):
                process.kill()

        for future in futures:
            future.result()

    def _encode_input(self, stage_input: Any) -> bytes | None:
        if stage_input is None:
            return None
        if isinstance(stage_input, str):
            return stage_input.encode(self.encoding)
        if isinstance(stage_input, (bytes, bytearray, memoryview)):
            return bytes(stage_input)
        raise TypeError(
            "Command stage input must be bytes or str, "
            f"got {type(stage_input).__name__}"
        )


def _feed(stream: IO[bytes], data: bytes) -> None:
    # A child that exits without reading its input closes the pipe early;
    # its exit status still reports the outcome.
    try:
        if data:
            stream.write(data)
    except BrokenPipeError:
        logger.debug("Child closed stdin before all input was written")
    finally:
        try:
            stream.close()
        except BrokenPipeError:
            pass


def _drain(stream: IO[bytes] | None, buffer: bytearray) -> None:
    if stream is None:
        return
    while True:
        chunk = stream.read1(_CHUNK_SIZE)  # type: ignore[attr-defined]
        if not chunk:
            break
        buffer.extend(chunk)


_DEFAULT_STAGE_RUNNER = StageRunner()


def get_stage_runner() -> StageRunner:
    """Return shared stage runner instance."""
    return _DEFAULT_STAGE_RUNNER
