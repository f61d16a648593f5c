from __future__ import annotations

from flowbundle.config.loaders import load_platform_config
from flowbundle.config.models import (
    DEFAULT_STAGE_TIMEOUT_SECONDS,
    BundleConfig,
    EngineBuildConfig,
    LoggingConfig,
    PlatformConfig,
)

__all__ = [
    "DEFAULT_STAGE_TIMEOUT_SECONDS",
    "BundleConfig",
    "EngineBuildConfig",
    "LoggingConfig",
    "PlatformConfig",
    "load_platform_config",
]
