"""Host-side API that program code imports.

Modules under ``flowbundle.api`` are shared read-only by every loaded
program; a program's code context always resolves them from the host
interpreter rather than from the program's own bundle.
"""

from __future__ import annotations

from flowbundle.api.flow import Flow, Flowlet, FlowletContext

__all__ = ["Flow", "Flowlet", "FlowletContext"]
