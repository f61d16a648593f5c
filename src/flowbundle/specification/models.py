from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping


def _check_str(owner: str, name: str, value: object) -> None:
    if not isinstance(value, str):
        raise TypeError(f"{owner}.{name} must be a string, got {type(value).__name__}")


def _check_positive_int(owner: str, name: str, value: object) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{owner}.{name} must be an integer, got {type(value).__name__}")
    if value < 1:
        raise ValueError(f"{name} must be a positive integer")


class FailurePolicy(Enum):
    """How a flowlet reacts to a processing error."""

    RETRY = "RETRY"
    IGNORE = "IGNORE"


@dataclass(frozen=True, slots=True)
class ResourceSpecification:
    virtual_cores: int = 1
    memory_mb: int = 512

    def __post_init__(self) -> None:
        _check_positive_int("ResourceSpecification", "virtual_cores", self.virtual_cores)
        _check_positive_int("ResourceSpecification", "memory_mb", self.memory_mb)


@dataclass(frozen=True, slots=True)
class FlowletSpecification:
    class_name: str
    name: str
    description: str
    failure_policy: FailurePolicy = FailurePolicy.RETRY
    properties: Mapping[str, str] = field(default_factory=dict)
    resources: ResourceSpecification = field(default_factory=ResourceSpecification)
    max_instances: int = 1

    def __post_init__(self) -> None:
        for name in ("class_name", "name", "description"):
            _check_str("FlowletSpecification", name, getattr(self, name))
        if not isinstance(self.failure_policy, FailurePolicy):
            raise TypeError("FlowletSpecification.failure_policy must be a FailurePolicy")
        _check_positive_int("FlowletSpecification", "max_instances", self.max_instances)
        object.__setattr__(self, "properties", dict(self.properties))

    def get_property(self, key: str, default: str | None = None) -> str | None:
        return self.properties.get(key, default)


@dataclass(frozen=True, slots=True)
class FlowletDefinition:
    flowlet_spec: FlowletSpecification
    instances: int = 1
    inputs: Mapping[str, str] = field(default_factory=dict)
    outputs: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        _check_positive_int("FlowletDefinition", "instances", self.instances)
        if self.instances > self.flowlet_spec.max_instances:
            raise ValueError(
                f"instances ({self.instances}) exceeds max_instances "
                f"({self.flowlet_spec.max_instances}) for flowlet '{self.flowlet_spec.name}'"
            )
        object.__setattr__(self, "inputs", dict(self.inputs))
        object.__setattr__(self, "outputs", dict(self.outputs))


@dataclass(frozen=True, slots=True)
class FlowletConnection:
    source_name: str
    target_name: str


@dataclass(frozen=True, slots=True)
class FlowSpecification:
    """Declarative description of a flow: its flowlets and how they connect."""

    class_name: str
    name: str
    description: str
    flowlets: Mapping[str, FlowletDefinition] = field(default_factory=dict)
    connections: tuple[FlowletConnection, ...] = ()

    def __post_init__(self) -> None:
        for name in ("class_name", "name", "description"):
            _check_str("FlowSpecification", name, getattr(self, name))
        object.__setattr__(self, "flowlets", dict(self.flowlets))
        object.__setattr__(self, "connections", tuple(self.connections))
        for connection in self.connections:
            for endpoint in (connection.source_name, connection.target_name):
                if endpoint not in self.flowlets:
                    raise ValueError(
                        f"connection references unknown flowlet '{endpoint}'"
                    )

    def flowlet_names(self) -> tuple[str, ...]:
        return tuple(sorted(self.flowlets))
