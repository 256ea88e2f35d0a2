"""Pipeline definitions loaded from YAML files.

A definition file looks like::

    input: "hello"        # optional, sent to the first stage
    mode: last            # optional: default, last or full
    check: false          # optional: abort on non-zero exit status
    stages:
      - echo hello        # shell-like string, split with shlex
      - [tr, a-z, A-Z]    # or an explicit argument list
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from procpipe.errors import PipelineFileError
from procpipe.models.stage import Command, OutputMode

logger = logging.getLogger(__name__)

_KNOWN_KEYS = frozenset({"input", "mode", "check", "stages"})


@dataclass(frozen=True, slots=True)
class PipelineDefinition:
    """Declarative pipeline of command stages."""

    stages: tuple[Command, ...]
    initial_input: str | None = None
    mode: OutputMode | None = None
    check: bool | None = None


def parse_stage(raw: Any) -> Command:
    """Build a command stage from a string or a list of arguments."""
    if isinstance(raw, str):
        return Command.parse(raw)
    if isinstance(raw, list):
        return Command.of([str(part) for part in raw])
    raise TypeError(
        f"stage must be a string or a list of arguments, got {type(raw).__name__}"
    )


def definition_from_dict(data: Any, path: Path) -> PipelineDefinition:
    """Validate a parsed YAML document and build a definition."""
    if not isinstance(data, dict):
        raise PipelineFileError(path, "top level must be a mapping")

    unknown = sorted(set(data) - _KNOWN_KEYS)
    if unknown:
        raise PipelineFileError(path, f"unknown keys: {', '.join(unknown)}")

    raw_stages = data.get("stages")
    if not isinstance(raw_stages, list) or not raw_stages:
        raise PipelineFileError(path, "'stages' must be a non-empty list")

    stages: list[Command] = []
    for position, raw in enumerate(raw_stages, start=1):
        try:
            stages.append(parse_stage(raw))
        except (TypeError, ValueError) as e:
            raise PipelineFileError(path, f"stage {position}: {e}") from e

    initial_input = data.get("input")
    if initial_input is not None and not isinstance(initial_input, str):
        raise PipelineFileError(path, "'input' must be a string")

    mode = None
    if data.get("mode") is not None:
        try:
            mode = OutputMode.parse(data["mode"])
        except ValueError as e:
            raise PipelineFileError(path, str(e)) from e

    check = data.get("check")
    if check is not None and not isinstance(check, bool):
        raise PipelineFileError(path, "'check' must be true or false")

    return PipelineDefinition(
        stages=tuple(stages),
        initial_input=initial_input,
        mode=mode,
        check=check,
    )


def load_definition(path: Path) -> PipelineDefinition:
    """Load a pipeline definition from a YAML file.

    Raises:
        PipelineFileError: If the file cannot be read or is invalid.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise PipelineFileError(path, str(e)) from e

    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise PipelineFileError(path, f"YAML parse error: {e}") from e

    definition = definition_from_dict(data, path)
    logger.info("Loaded %d stage(s) from %s", len(definition.stages), path)
    return definition
