from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping

from flowbundle.specification.models import FlowletSpecification, FlowSpecification


def _empty_mapping() -> Mapping[str, str]:
    return MappingProxyType({})


@dataclass(frozen=True, slots=True)
class FlowletContext:
    instance_id: int
    instance_count: int
    runtime_arguments: Mapping[str, str] = field(default_factory=_empty_mapping)


class Flowlet:
    """Base class for a unit of processing logic within a flow."""

    def configure(self) -> FlowletSpecification:
        raise NotImplementedError

    def initialize(self, context: FlowletContext) -> None:
        self.context = context

    def process(self, event: Any) -> None:
        raise NotImplementedError

    def destroy(self) -> None:
        return None


class Flow:
    """Base class for a program's main class."""

    def configure(self) -> FlowSpecification:
        raise NotImplementedError
