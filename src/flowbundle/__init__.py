from __future__ import annotations

from importlib import import_module

from flowbundle.__about__ import __version__

__all__ = [
    "FailurePolicy",
    "FlowletSpecification",
    "FlowletSpecificationCodec",
    "FlowSpecification",
    "FlowSpecificationAdapter",
    "ResourceSpecification",
    "Program",
    "ProgramCodeContext",
    "open_program",
    "write_bundle",
    "NativeEngineBuilder",
    "build_engine",
    "run_external_step",
    "load_platform_config",
    "__version__",
]

_LAZY_IMPORTS: dict[str, tuple[str, str]] = {
    "FailurePolicy": ("flowbundle.specification", "FailurePolicy"),
    "FlowletSpecification": ("flowbundle.specification", "FlowletSpecification"),
    "FlowletSpecificationCodec": ("flowbundle.specification", "FlowletSpecificationCodec"),
    "FlowSpecification": ("flowbundle.specification", "FlowSpecification"),
    "FlowSpecificationAdapter": ("flowbundle.specification", "FlowSpecificationAdapter"),
    "ResourceSpecification": ("flowbundle.specification", "ResourceSpecification"),
    "Program": ("flowbundle.program", "Program"),
    "ProgramCodeContext": ("flowbundle.program", "ProgramCodeContext"),
    "open_program": ("flowbundle.program", "open_program"),
    "write_bundle": ("flowbundle.program", "write_bundle"),
    "NativeEngineBuilder": ("flowbundle.engine", "NativeEngineBuilder"),
    "build_engine": ("flowbundle.engine", "build_engine"),
    "run_external_step": ("flowbundle.engine", "run_external_step"),
    "load_platform_config": ("flowbundle.config", "load_platform_config"),
}

_SUBMODULES = {
    "api",
    "commands",
    "config",
    "engine",
    "errors",
    "program",
    "specification",
}


def __getattr__(name: str) -> object:
    if name in _SUBMODULES:
        module = import_module(f"flowbundle.{name}")
        globals()[name] = module
        return module

    target = _LAZY_IMPORTS.get(name)
    if target is None:
        raise AttributeError(f"module 'flowbundle' has no attribute '{name}'")
    module_name, attr_name = target
    module = import_module(module_name)
    value = getattr(module, attr_name)
    globals()[name] = value
    return value


def __dir__() -> list[str]:
    return sorted(set(globals()) | set(__all__))
