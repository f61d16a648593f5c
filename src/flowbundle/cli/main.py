from __future__ import annotations

import argparse
import logging
import sys

from flowbundle.cli.handlers import (
    handle_config_validate,
    handle_engine_build,
    handle_inspect,
    handle_spec_validate,
    handle_unpack,
)
from flowbundle.cli.parser import build_parser
from flowbundle.config import PlatformConfig, load_platform_config
from flowbundle.errors import (
    CodeLoadError,
    ConfigurationError,
    DeserializationError,
    EngineProvisionError,
    FlowBundleError,
    MalformedBundleError,
    MissingAttributeError,
    SpecificationLoadError,
    StepTimeoutError,
)

_EXIT_OK = 0
_EXIT_GENERIC = 1
_EXIT_CONFIG = 2
_EXIT_BUNDLE = 3
_EXIT_ENGINE = 4

_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _load_config(args: argparse.Namespace) -> PlatformConfig:
    if args.config:
        return load_platform_config(args.config)
    return PlatformConfig()


def _configure_logging(args: argparse.Namespace, config: PlatformConfig) -> None:
    level = args.log_level or config.logging.level
    logging.basicConfig(level=getattr(logging, level), format=_LOG_FORMAT)


def _dispatch(args: argparse.Namespace) -> int | None:
    if args.command == "config" and args.config_command == "validate":
        return handle_config_validate(args)

    config = _load_config(args)
    _configure_logging(args, config)
    if args.command == "inspect":
        return handle_inspect(args, config)
    if args.command == "unpack":
        return handle_unpack(args, config)
    if args.command == "spec" and args.spec_command == "validate":
        return handle_spec_validate(args, config)
    if args.command == "engine" and args.engine_command == "build":
        return handle_engine_build(args, config)
    return None


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        code = _dispatch(args)
    except ConfigurationError as exc:
        print(str(exc), file=sys.stderr)
        return _EXIT_CONFIG
    except (
        MalformedBundleError,
        MissingAttributeError,
        SpecificationLoadError,
        DeserializationError,
        CodeLoadError,
    ) as exc:
        print(str(exc), file=sys.stderr)
        return _EXIT_BUNDLE
    except (EngineProvisionError, StepTimeoutError) as exc:
        print(str(exc), file=sys.stderr)
        return _EXIT_ENGINE
    except FlowBundleError as exc:
        print(str(exc), file=sys.stderr)
        return _EXIT_GENERIC

    if code is None:
        parser.error("unhandled command")
    return code


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
