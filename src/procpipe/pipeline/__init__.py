"""Pipeline composition."""

from procpipe.pipeline.composer import (
    PipelineCall,
    compose,
    run_stages,
    select_output,
    split_arguments,
)
from procpipe.pipeline.definition import (
    PipelineDefinition,
    definition_from_dict,
    load_definition,
    parse_stage,
)

__all__ = [
    "PipelineCall",
    "PipelineDefinition",
    "compose",
    "definition_from_dict",
    "load_definition",
    "parse_stage",
    "run_stages",
    "select_output",
    "split_arguments",
]
