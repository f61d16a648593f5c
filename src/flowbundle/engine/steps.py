from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Sequence

from flowbundle.errors import StepTimeoutError

LOGGER = logging.getLogger(__name__)

_REAP_TIMEOUT_SECONDS = 5.0


@dataclass(frozen=True, slots=True)
class BuildStage:
    name: str
    working_dir: Path
    command: tuple[str, ...]
    timeout: float
    failure_message: str


@dataclass(frozen=True, slots=True)
class StepOutcome:
    name: str
    exit_code: int
    output: str = ""

    @property
    def succeeded(self) -> bool:
        return self.exit_code == 0


StepExecutor = Callable[[BuildStage], StepOutcome]


def run_external_step(
    name: str,
    working_dir: str | Path,
    command: Sequence[str],
    timeout: float,
) -> StepOutcome:
    """Run ``command`` in ``working_dir`` and wait up to ``timeout`` seconds.

    The exit code is reported as-is; deciding whether it means failure is up
    to the caller. A child still running at the deadline is killed and
    ``StepTimeoutError`` is raised.
    """
    cwd = Path(working_dir)
    LOGGER.info("starting step '%s' in '%s': %s", name, cwd, " ".join(command))
    process = subprocess.Popen(
        list(command),
        cwd=cwd,
        stdout=subprocess.PIPE,
        stderr=subprocess.STDOUT,
        encoding="utf-8",
        errors="replace",
    )
    try:
        output, _ = process.communicate(timeout=timeout)
    except subprocess.TimeoutExpired as exc:
        process.kill()
        try:
            process.communicate(timeout=_REAP_TIMEOUT_SECONDS)
        except subprocess.TimeoutExpired:
            LOGGER.warning("step '%s' (pid %s) not reaped after kill", name, process.pid)
        raise StepTimeoutError(name, timeout) from exc

    if output:
        LOGGER.debug("step '%s' output:\n%s", name, output.rstrip())
    LOGGER.info("step '%s' exited with code %d", name, process.returncode)
    return StepOutcome(name=name, exit_code=process.returncode, output=output or "")


@dataclass(frozen=True, slots=True)
class SubprocessStepExecutor:
    """Executes build stages as child processes."""

    def __call__(self, stage: BuildStage) -> StepOutcome:
        return run_external_step(stage.name, stage.working_dir, stage.command, stage.timeout)
