"""Tests for pipeline composition."""

from __future__ import annotations

from sys import executable
from typing import Any

import pytest

from procpipe import FULL, LAST, compose
from procpipe.errors import NonZeroExitError, SpawnError
from procpipe.models.stage import (
    Command,
    OutputMode,
    PipelineState,
    StageResult,
    Transform,
)
from procpipe.pipeline.composer import run_stages, select_output, split_arguments


def _identity(value: Any) -> Any:
    return value


class TestSplitArguments:
    def test_leading_raw_value_becomes_input(self) -> None:
        call = split_arguments(["hello", ["cat"]])

        assert call.initial_input == "hello"
        assert call.stages == (Command(("cat",)),)
        assert call.mode is OutputMode.DEFAULT

    def test_trailing_mode_is_removed(self) -> None:
        call = split_arguments([["echo", "hi"], str.upper, LAST])

        assert call.initial_input is None
        assert call.mode is OutputMode.LAST
        assert isinstance(call.stages[1], Transform)

    def test_mode_token_is_never_taken_as_input(self) -> None:
        call = split_arguments([FULL])

        assert call.initial_input is None
        assert call.stages == ()
        assert call.mode is OutputMode.FULL

    def test_rejects_unknown_stage_values(self) -> None:
        with pytest.raises(TypeError):
            split_arguments([b"data", 42])


class TestCompose:
    def test_zero_stages_returns_input_unchanged(self) -> None:
        assert compose("x") == "x"

    def test_zero_stages_still_shapes_output(self) -> None:
        assert compose("x", LAST) == StageResult(output="x")
        state = compose("x", FULL)
        assert state.history == ()
        assert state.tail.output == "x"

    def test_single_cat_stage_echoes_input(self) -> None:
        assert compose("hello", ["cat"]) == b"hello"

    def test_echo_into_cat(self) -> None:
        assert compose(["echo", "hello"], ["cat"]) == b"hello\n"

    def test_last_mode_returns_tail_result(self) -> None:
        result = compose(["echo", "hello"], ["cat"], LAST)

        assert result == StageResult(output=b"hello\n", error=b"", exit_status=0)

    def test_full_mode_returns_history(self) -> None:
        state = compose(["echo", "hello"], ["cat"], FULL)

        assert isinstance(state, PipelineState)
        assert len(state.history) == 2
        assert state.tail is state.history[-1]
        assert state.tail == compose(["echo", "hello"], ["cat"], LAST)

    @pytest.mark.parametrize("count", [1, 3, 5])
    def test_identity_stages_preserve_input(self, count: int) -> None:
        stages: list[Any] = []
        for index in range(count):
            stages.append(["cat"] if index % 2 else _identity)

        assert compose(b"payload", *stages) == b"payload"
        state = compose(b"payload", *stages, FULL)
        assert len(state.history) == count
        assert state.tail is state.history[-1]

    def test_nested_pipeline_as_input(self) -> None:
        assert compose(compose(["echo", "hello"]), ["cat"]) == b"hello\n"

    def test_transform_can_run_a_nested_pipeline(self) -> None:
        result = compose(lambda _: compose(["echo", "hello"]), ["cat"])

        assert result == b"hello\n"

    def test_mixed_commands_and_transforms(self) -> None:
        result = compose("b\na\n", ["sort"], bytes.upper)

        assert result == b"A\nB\n"

    def test_spawn_failure_aborts_remaining_stages(self) -> None:
        ran: list[Any] = []

        def side_effect(value: Any) -> Any:
            ran.append(value)
            return value

        with pytest.raises(SpawnError) as excinfo:
            compose("x", ["procpipe-missing-executable"], side_effect)

        assert ran == []
        assert excinfo.value.stage_position == 1
        assert str(excinfo.value).startswith("Stage 1:")

    def test_nul_byte_in_command_raises_spawn_error(self) -> None:
        with pytest.raises(SpawnError) as excinfo:
            compose("x", ["ca\0t"])

        assert excinfo.value.stage_position == 1

    def test_nested_failure_keeps_inner_stage_position(self) -> None:
        def inner(_: Any) -> Any:
            return compose("x", ["cat"], ["procpipe-missing-executable"])

        with pytest.raises(SpawnError) as excinfo:
            compose(["echo", "hi"], ["cat"], inner)

        error = excinfo.value
        assert error.stage_position == 2
        assert error.program == "procpipe-missing-executable"
        assert str(error).startswith("Stage 2:")
        assert any("pipeline stage 3: " in note for note in error.__notes__)

    def test_transform_errors_propagate_with_stage_note(self) -> None:
        ran: list[Any] = []

        def fail(_: Any) -> Any:
            raise KeyError("missing")

        with pytest.raises(KeyError) as excinfo:
            compose("x", ["cat"], fail, ran.append)

        assert ran == []
        assert excinfo.value.pipeline_stage == 2
        assert any("pipeline stage 2" in note for note in excinfo.value.__notes__)

    def test_non_zero_exit_does_not_abort_by_default(self) -> None:
        failing = [executable, "-c", "import sys; print('partial'); sys.exit(4)"]

        state = compose(failing, ["cat"], FULL)

        assert [result.exit_status for result in state.history] == [4, 0]
        assert state.tail.output == b"partial\n"

    def test_check_aborts_on_non_zero_exit(self) -> None:
        ran: list[Any] = []
        failing = [
            executable,
            "-c",
            "import sys; sys.stderr.write('nope'); sys.exit(4)",
        ]

        with pytest.raises(NonZeroExitError) as excinfo:
            compose(failing, ran.append, check=True)

        assert ran == []
        assert excinfo.value.exit_status == 4
        assert excinfo.value.stderr == b"nope"
        assert excinfo.value.stage_position == 1


def test_run_stages_threads_outputs() -> None:
    stages = [
        Transform(lambda value: value + "b"),
        Transform(lambda value: value + "c"),
    ]

    state = run_stages(stages, "a")

    assert [result.output for result in state.history] == ["ab", "abc"]


def test_select_output_by_mode() -> None:
    result = StageResult(output=b"out", error=b"", exit_status=0)
    state = PipelineState.start().append(result)

    assert select_output(state, OutputMode.DEFAULT) == b"out"
    assert select_output(state, OutputMode.LAST) is result
    assert select_output(state, OutputMode.FULL) is state
