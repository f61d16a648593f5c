from __future__ import annotations

from flowbundle.engine.builder import (
    DEFAULT_QUERY_FILE,
    DEFAULT_SCHEMA_FILE,
    STAGE_COMPILE,
    STAGE_COPY_CONTROL_BINARY,
    STAGE_TRANSLATE,
    BuildPipeline,
    NativeEngineBuilder,
    build_engine,
    run_pipeline,
)
from flowbundle.engine.steps import (
    BuildStage,
    StepExecutor,
    StepOutcome,
    SubprocessStepExecutor,
    run_external_step,
)

__all__ = [
    "DEFAULT_QUERY_FILE",
    "DEFAULT_SCHEMA_FILE",
    "STAGE_COMPILE",
    "STAGE_COPY_CONTROL_BINARY",
    "STAGE_TRANSLATE",
    "BuildPipeline",
    "BuildStage",
    "NativeEngineBuilder",
    "StepExecutor",
    "StepOutcome",
    "SubprocessStepExecutor",
    "build_engine",
    "run_external_step",
    "run_pipeline",
]
