from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from flowbundle.config import load_platform_config
from flowbundle.config.models import EngineBuildConfig, LoggingConfig, PlatformConfig
from flowbundle.errors import ConfigurationError


def test_defaults_without_file() -> None:
    cfg = PlatformConfig()
    assert cfg.bundle.working_root is None
    assert cfg.engine.stage_timeout_seconds == 20.0
    assert cfg.engine.shell == Path("/bin/sh")
    assert cfg.logging.level == "WARNING"


def test_load_platform_config_resolves_paths(platform_config_path: Path) -> None:
    cfg = load_platform_config(platform_config_path)
    assert cfg.bundle.working_root == (platform_config_path.parent / "work").resolve()
    assert cfg.engine.stage_timeout_seconds == 5.0
    assert cfg.logging.level == "INFO"


def test_absolute_working_root_kept(tmp_path: Path) -> None:
    root = tmp_path / "abs-root"
    path = tmp_path / "platform.toml"
    path.write_text(f'[bundle]\nworking_root = "{root}"\n', encoding="utf-8")
    assert load_platform_config(path).bundle.working_root == root


def test_load_platform_config_invalid_toml(tmp_path: Path) -> None:
    path = tmp_path / "broken.toml"
    path.write_text("[engine\nshell='x'", encoding="utf-8")
    with pytest.raises(ConfigurationError):
        load_platform_config(path)


def test_load_platform_config_missing_file(tmp_path: Path) -> None:
    with pytest.raises(ConfigurationError, match="cannot read config file"):
        load_platform_config(tmp_path / "absent.toml")


def test_load_platform_config_schema_error_wrapped(tmp_path: Path) -> None:
    path = tmp_path / "platform.toml"
    path.write_text("[engine]\nstage_timeout_seconds = 0\n", encoding="utf-8")
    with pytest.raises(ConfigurationError, match="invalid platform config"):
        load_platform_config(path)


def test_unknown_keys_rejected() -> None:
    with pytest.raises(ValidationError):
        PlatformConfig.model_validate({"engine": {"retries": 3}})


def test_timeout_must_be_positive() -> None:
    with pytest.raises(ValidationError):
        EngineBuildConfig(stage_timeout_seconds=-1.0)


def test_log_level_normalized_and_checked() -> None:
    assert LoggingConfig.model_validate({"level": " debug "}).level == "DEBUG"
    with pytest.raises(ValidationError):
        LoggingConfig.model_validate({"level": "verbose"})
