from __future__ import annotations

from flowbundle.commands.stop import FlowOperations, StopCommand

__all__ = ["FlowOperations", "StopCommand"]
