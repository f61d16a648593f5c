from __future__ import annotations

from typing import Mapping, Protocol, TextIO, runtime_checkable

from flowbundle.errors import ConfigurationError


@runtime_checkable
class FlowOperations(Protocol):
    def stop_flow(self, flow_name: str) -> None: ...


class StopCommand:
    pattern = "stop <flow-name>"
    description = "Stops a Flow"

    def __init__(self, operations: FlowOperations) -> None:
        self.operations = operations

    def execute(self, arguments: Mapping[str, str], output: TextIO | None = None) -> None:
        flow_name = arguments.get("flow-name")
        if flow_name is None or not flow_name.strip():
            raise ConfigurationError("missing required argument 'flow-name'")
        self.operations.stop_flow(flow_name)
