from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


class FlowBundleError(Exception):
    """Base exception for bundle loading, specification and engine failures."""


class ConfigurationError(FlowBundleError):
    """Raised when platform configuration is invalid or incomplete."""


@dataclass(slots=True)
class MalformedBundleError(FlowBundleError):
    """Raised when a bundle cannot be read or carries no manifest."""

    bundle: Path
    detail: str

    def __str__(self) -> str:
        return f"malformed bundle '{self.bundle}': {self.detail}"


@dataclass(slots=True)
class MissingAttributeError(FlowBundleError):
    """Raised when a mandatory manifest attribute is absent."""

    bundle: Path
    attribute: str

    def __str__(self) -> str:
        return f"failed to get '{self.attribute}' attribute from bundle '{self.bundle}'"


@dataclass(slots=True)
class SpecificationLoadError(FlowBundleError):
    """Raised when a program specification cannot be read or parsed."""

    source: str
    detail: str

    def __str__(self) -> str:
        return f"failed loading specification from '{self.source}': {self.detail}"


@dataclass(slots=True)
class CodeLoadError(FlowBundleError):
    """Raised when program code cannot be loaded."""

    detail: str

    def __str__(self) -> str:
        return f"code load failed: {self.detail}"


@dataclass(slots=True)
class DeserializationError(FlowBundleError):
    """Raised when a specification record is missing or has an invalid field."""

    field: str
    detail: str

    def __str__(self) -> str:
        return f"invalid specification field '{self.field}': {self.detail}"


@dataclass(slots=True)
class EngineProvisionError(FlowBundleError):
    """Raised when a native engine build stage fails."""

    stage: str
    exit_code: int | None
    detail: str

    def __str__(self) -> str:
        return (
            f"stream engine provisioning failed at stage '{self.stage}' "
            f"(exit code {self.exit_code}): {self.detail}"
        )


class StepTimeoutError(FlowBundleError, TimeoutError):
    """Raised when an external step does not exit within its timeout."""

    def __init__(self, step: str, timeout: float) -> None:
        self.step = step
        self.timeout = timeout
        super().__init__(f"step '{step}' did not exit within {timeout:g}s")

    def __str__(self) -> str:
        return f"step '{self.step}' did not exit within {self.timeout:g}s"
