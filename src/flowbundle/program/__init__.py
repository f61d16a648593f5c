from __future__ import annotations

from flowbundle.program.bundle import (
    MAIN_CLASS,
    MANIFEST_ENTRY,
    SPEC_FILE,
    BundleManifest,
    read_entry,
    read_manifest,
    unpack_bundle,
    write_bundle,
)
from flowbundle.program.code_context import ProgramCodeContext, get_api_resources
from flowbundle.program.once import OnceCell
from flowbundle.program.program import Program, open_program

__all__ = [
    "MAIN_CLASS",
    "MANIFEST_ENTRY",
    "SPEC_FILE",
    "BundleManifest",
    "OnceCell",
    "Program",
    "ProgramCodeContext",
    "get_api_resources",
    "open_program",
    "read_entry",
    "read_manifest",
    "unpack_bundle",
    "write_bundle",
]
