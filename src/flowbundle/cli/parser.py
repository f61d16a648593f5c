from __future__ import annotations

import argparse

from flowbundle.engine.builder import DEFAULT_QUERY_FILE, DEFAULT_SCHEMA_FILE


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="flowbundle")
    parser.add_argument("--config", default=None, help="Platform config TOML file")
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
    )
    sub = parser.add_subparsers(dest="command", required=True)

    inspect_parser = sub.add_parser(
        "inspect", help="Read a bundle's manifest and specification without unpacking"
    )
    inspect_parser.add_argument("--bundle", required=True)

    unpack_parser = sub.add_parser(
        "unpack", help="Unpack a bundle and load its specification from disk"
    )
    unpack_parser.add_argument("--bundle", required=True)
    unpack_parser.add_argument("--working-dir", default=None)

    spec_parser = sub.add_parser("spec", help="Flow specification operations")
    spec_sub = spec_parser.add_subparsers(dest="spec_command", required=True)
    spec_validate = spec_sub.add_parser("validate", help="Validate a flow specification file")
    spec_validate.add_argument("--file", required=True)

    engine_parser = sub.add_parser("engine", help="Stream engine provisioning")
    engine_sub = engine_parser.add_subparsers(dest="engine_command", required=True)
    engine_build = engine_sub.add_parser(
        "build", help="Build stream engine binaries in a target directory"
    )
    engine_build.add_argument("--target-dir", required=True)
    engine_build.add_argument("--schema", default=DEFAULT_SCHEMA_FILE)
    engine_build.add_argument("--query", default=DEFAULT_QUERY_FILE)

    config_parser = sub.add_parser("config", help="Platform config operations")
    config_sub = config_parser.add_subparsers(dest="config_command", required=True)
    config_validate = config_sub.add_parser("validate", help="Validate platform config")
    config_validate.add_argument("--config", dest="config_path", required=True)

    return parser
