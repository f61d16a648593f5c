from __future__ import annotations

import logging
import shlex
from dataclasses import dataclass
from pathlib import Path

from flowbundle.config.models import EngineBuildConfig
from flowbundle.engine.steps import (
    BuildStage,
    StepExecutor,
    StepOutcome,
    SubprocessStepExecutor,
)
from flowbundle.errors import ConfigurationError, EngineProvisionError, StepTimeoutError

LOGGER = logging.getLogger(__name__)

STAGE_COPY_CONTROL_BINARY = "copy-control-binary"
STAGE_TRANSLATE = "translate"
STAGE_COMPILE = "compile"

# relative to the target directory
CONTROL_BINARY_SOURCE = "../../bin/gsexit"
CONTROL_BINARY_NAME = "GSEXIT"
TRANSLATOR = "../../bin/translate_fta"
TRANSLATOR_HOST = "localhost"
MAKE_COMMAND = "make"

DEFAULT_SCHEMA_FILE = "packet_schema.txt"
DEFAULT_QUERY_FILE = "query.gsql"


@dataclass(frozen=True, slots=True)
class BuildPipeline:
    stages: tuple[BuildStage, ...]

    def names(self) -> tuple[str, ...]:
        return tuple(stage.name for stage in self.stages)


def run_pipeline(pipeline: BuildPipeline, executor: StepExecutor) -> tuple[StepOutcome, ...]:
    """Run stages in order and stop at the first one that exits non-zero."""
    outcomes: list[StepOutcome] = []
    for stage in pipeline.stages:
        try:
            outcome = executor(stage)
        except StepTimeoutError:
            # StepTimeoutError is also an OSError; keep it distinct
            LOGGER.error("stage '%s' timed out after %gs", stage.name, stage.timeout)
            raise
        except OSError as exc:
            LOGGER.error("stage '%s' could not be started: %s", stage.name, exc)
            raise EngineProvisionError(
                stage.name, None, f"{stage.failure_message}: {exc}"
            ) from exc
        if outcome.exit_code != 0:
            LOGGER.error(
                "stage '%s' failed with exit code %d: %s",
                stage.name,
                outcome.exit_code,
                stage.failure_message,
            )
            raise EngineProvisionError(stage.name, outcome.exit_code, stage.failure_message)
        outcomes.append(outcome)
    return tuple(outcomes)


class NativeEngineBuilder:
    """Provisions the compiled binaries of a continuous-query engine.

    The build copies the control-exit binary into the target directory,
    translates the schema and query files into generated sources, and
    compiles them. Stages run strictly in order and the first failure
    aborts the build; artifacts produced by earlier stages are left in place.
    Builds into the same target directory must not run concurrently.
    """

    def __init__(
        self,
        config: EngineBuildConfig | None = None,
        executor: StepExecutor | None = None,
    ) -> None:
        self.config = config or EngineBuildConfig()
        self.executor: StepExecutor = executor or SubprocessStepExecutor()

    def _shell_command(self, script: str) -> tuple[str, ...]:
        return (str(self.config.shell), "-c", script)

    def stages_for(
        self,
        target_dir: str | Path,
        schema_file: str = DEFAULT_SCHEMA_FILE,
        query_file: str = DEFAULT_QUERY_FILE,
    ) -> BuildPipeline:
        for label, value in (("schema file", schema_file), ("query file", query_file)):
            if not value or not value.strip():
                raise ConfigurationError(f"{label} name must be non-empty")
        directory = Path(target_dir)
        timeout = self.config.stage_timeout_seconds
        translate = " ".join(
            [
                TRANSLATOR,
                "-h",
                TRANSLATOR_HOST,
                "-c -S -M -C .",
                shlex.quote(schema_file),
                shlex.quote(query_file),
            ]
        )
        return BuildPipeline(
            stages=(
                BuildStage(
                    name=STAGE_COPY_CONTROL_BINARY,
                    working_dir=directory,
                    command=self._shell_command(
                        f"cp {CONTROL_BINARY_SOURCE} ./{CONTROL_BINARY_NAME}"
                    ),
                    timeout=timeout,
                    failure_message="control binary copy failed",
                ),
                BuildStage(
                    name=STAGE_TRANSLATE,
                    working_dir=directory,
                    command=self._shell_command(translate),
                    timeout=timeout,
                    failure_message="engine binary build failed",
                ),
                BuildStage(
                    name=STAGE_COMPILE,
                    working_dir=directory,
                    command=self._shell_command(MAKE_COMMAND),
                    timeout=timeout,
                    failure_message="engine binary make failed",
                ),
            )
        )

    def build(
        self,
        target_dir: str | Path,
        schema_file: str = DEFAULT_SCHEMA_FILE,
        query_file: str = DEFAULT_QUERY_FILE,
    ) -> tuple[StepOutcome, ...]:
        directory = Path(target_dir)
        if not directory.is_dir():
            raise ConfigurationError(f"engine target directory '{directory}' does not exist")
        pipeline = self.stages_for(directory, schema_file, query_file)
        LOGGER.info("building stream engine binaries in '%s'", directory)
        outcomes = run_pipeline(pipeline, self.executor)
        LOGGER.info("stream engine binaries ready in '%s'", directory)
        return outcomes


def build_engine(
    target_dir: str | Path,
    schema_file: str = DEFAULT_SCHEMA_FILE,
    query_file: str = DEFAULT_QUERY_FILE,
    *,
    config: EngineBuildConfig | None = None,
) -> tuple[StepOutcome, ...]:
    return NativeEngineBuilder(config).build(target_dir, schema_file, query_file)
