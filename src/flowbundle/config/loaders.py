from __future__ import annotations

import tomllib
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from flowbundle.config.models import PlatformConfig
from flowbundle.errors import ConfigurationError


def _read_toml(path: Path) -> dict[str, Any]:
    try:
        return tomllib.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ConfigurationError(f"cannot read config file '{path}': {exc}") from exc
    except tomllib.TOMLDecodeError as exc:
        raise ConfigurationError(f"invalid TOML in '{path}': {exc}") from exc


def load_platform_config(path: str | Path) -> PlatformConfig:
    config_path = Path(path).expanduser().resolve()
    raw = _read_toml(config_path)
    try:
        config = PlatformConfig.model_validate(raw)
    except ValidationError as exc:
        raise ConfigurationError(
            f"invalid platform config '{config_path}': {exc}"
        ) from exc
    return _resolve_platform_paths(config, config_path.parent)


def _resolve_platform_paths(config: PlatformConfig, base_dir: Path) -> PlatformConfig:
    working_root = config.bundle.working_root
    if working_root is None or working_root.is_absolute():
        return config
    return config.model_copy(
        update={
            "bundle": config.bundle.model_copy(
                update={"working_root": (base_dir / working_root).resolve()}
            )
        }
    )
