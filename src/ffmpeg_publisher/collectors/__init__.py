"""Metadata collectors for the FFmpeg build tree."""

from __future__ import annotations

from .aggregator import BuildInfoAggregator
from .versions import (
    DEFAULT_DEPENDENCIES,
    CollectorError,
    DependencySpec,
    git_version,
    read_ffmpeg_config,
    read_ffmpeg_version,
    snapshot_version,
)

__all__ = [
    "BuildInfoAggregator",
    "CollectorError",
    "DEFAULT_DEPENDENCIES",
    "DependencySpec",
    "git_version",
    "read_ffmpeg_config",
    "read_ffmpeg_version",
    "snapshot_version",
]
