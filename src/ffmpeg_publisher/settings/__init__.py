"""Settings package exports."""

from .loader import (
    RECORD_MODE_APPEND,
    RECORD_MODE_OVERWRITE,
    AppConfig,
    BuildSettings,
    PathSettings,
    PublishSettings,
    load_config,
)

__all__ = [
    "AppConfig",
    "BuildSettings",
    "PathSettings",
    "PublishSettings",
    "RECORD_MODE_APPEND",
    "RECORD_MODE_OVERWRITE",
    "load_config",
]
