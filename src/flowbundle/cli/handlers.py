from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Any

from flowbundle.config import PlatformConfig, load_platform_config
from flowbundle.engine import NativeEngineBuilder
from flowbundle.errors import ConfigurationError, SpecificationLoadError
from flowbundle.program import Program, open_program
from flowbundle.specification import FlowSpecification, FlowSpecificationAdapter

_EXIT_OK = 0


def _print_json(payload: Any) -> None:
    print(json.dumps(payload, indent=2, sort_keys=True))


def _program_summary(program: Program, spec: FlowSpecification) -> dict[str, Any]:
    return {
        "bundle": str(program.bundle_path.resolve()),
        "main_class": program.main_class_name,
        "flow": spec.name,
        "flowlets": {
            name: {
                "class_name": definition.flowlet_spec.class_name,
                "failure_policy": definition.flowlet_spec.failure_policy.name,
                "instances": definition.instances,
            }
            for name, definition in spec.flowlets.items()
        },
        "connections": [
            [connection.source_name, connection.target_name]
            for connection in spec.connections
        ],
    }


def handle_inspect(args: argparse.Namespace, config: PlatformConfig) -> int:
    program = open_program(args.bundle)
    _print_json(_program_summary(program, program.get_specification()))
    return _EXIT_OK


def _resolve_working_dir(args: argparse.Namespace, config: PlatformConfig) -> Path:
    if args.working_dir:
        return Path(args.working_dir).expanduser().resolve()
    if config.bundle.working_root is None:
        raise ConfigurationError(
            "unpack requires --working-dir or [bundle] working_root in the platform config"
        )
    return config.bundle.working_root / Path(args.bundle).stem


def handle_unpack(args: argparse.Namespace, config: PlatformConfig) -> int:
    working_dir = _resolve_working_dir(args, config)
    program = open_program(args.bundle, working_dir)
    payload = _program_summary(program, program.get_specification())
    payload["working_dir"] = str(working_dir)
    _print_json(payload)
    return _EXIT_OK


def handle_spec_validate(args: argparse.Namespace, config: PlatformConfig) -> int:
    path = Path(args.file).expanduser().resolve()
    try:
        spec = FlowSpecificationAdapter.from_file(path)
    except OSError as exc:
        raise SpecificationLoadError(str(path), f"cannot read file: {exc}") from exc
    print(FlowSpecificationAdapter.to_json(spec))
    return _EXIT_OK


def handle_engine_build(args: argparse.Namespace, config: PlatformConfig) -> int:
    builder = NativeEngineBuilder(config.engine)
    outcomes = builder.build(args.target_dir, args.schema, args.query)
    _print_json(
        {
            "target_dir": str(Path(args.target_dir).expanduser().resolve()),
            "stages": {outcome.name: outcome.exit_code for outcome in outcomes},
        }
    )
    return _EXIT_OK


def handle_config_validate(args: argparse.Namespace) -> int:
    cfg = load_platform_config(args.config_path)
    _print_json(cfg.model_dump(mode="json"))
    return _EXIT_OK
