from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

LOG_LEVEL_NAME = Literal["DEBUG", "INFO", "WARNING", "ERROR"]

DEFAULT_STAGE_TIMEOUT_SECONDS = 20.0


class StrictModel(BaseModel):
    model_config = ConfigDict(extra="forbid", strict=True)


def _coerce_path(value: object, *, label: str) -> Path:
    if isinstance(value, Path):
        return value
    if isinstance(value, str):
        return Path(value)
    raise TypeError(f"{label} must be a path-like string")


class BundleConfig(StrictModel):
    working_root: Path | None = None

    @field_validator("working_root", mode="before")
    @classmethod
    def _coerce_working_root(cls, value: object) -> Path | None:
        if value is None:
            return None
        return _coerce_path(value, label="bundle.working_root")


class EngineBuildConfig(StrictModel):
    stage_timeout_seconds: float = Field(default=DEFAULT_STAGE_TIMEOUT_SECONDS, gt=0)
    shell: Path = Path("/bin/sh")

    @field_validator("stage_timeout_seconds", mode="before")
    @classmethod
    def _coerce_timeout(cls, value: object) -> object:
        if isinstance(value, int) and not isinstance(value, bool):
            return float(value)
        return value

    @field_validator("shell", mode="before")
    @classmethod
    def _coerce_shell(cls, value: object) -> Path:
        return _coerce_path(value, label="engine.shell")


class LoggingConfig(StrictModel):
    level: LOG_LEVEL_NAME = "WARNING"

    @field_validator("level", mode="before")
    @classmethod
    def _normalize_level(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip().upper()
        return value


class PlatformConfig(StrictModel):
    bundle: BundleConfig = Field(default_factory=BundleConfig)
    engine: EngineBuildConfig = Field(default_factory=EngineBuildConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
