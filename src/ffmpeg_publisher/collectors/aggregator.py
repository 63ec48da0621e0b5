"""Assemble collector results into a :class:`BuildRecord`."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Sequence

from ..core.process import ProcessRunner
from ..services.build_models import Attachment, BuildRecord, FFmpegInfo
from ..settings import BuildSettings
from ..utils.logging import get_logger
from .versions import (
    DEFAULT_DEPENDENCIES,
    DependencySpec,
    describe_dependency,
    read_ffmpeg_config,
    read_ffmpeg_version,
)

LOGGER = get_logger(__name__)


class BuildInfoAggregator:
    """Collects binary and dependency metadata from a finished build tree."""

    def __init__(
        self,
        runner: ProcessRunner,
        build_root: Path,
        *,
        settings: BuildSettings | None = None,
        dependencies: Sequence[DependencySpec] = DEFAULT_DEPENDENCIES,
        max_workers: int = 1,
    ) -> None:
        self._runner = runner
        self._build_root = build_root
        self._settings = settings or BuildSettings()
        self._dependencies = tuple(dependencies)
        self._max_workers = max(1, max_workers)

    def collect(self) -> BuildRecord:
        ffmpeg = self.collect_ffmpeg()
        libs = self.collect_libraries()
        attachment = self.attachment_for(ffmpeg.version)
        LOGGER.info(
            "Collected build information",
            extra={"event": "collect.done", "version": ffmpeg.version, "libs": len(libs)},
        )
        return BuildRecord(ffmpeg=ffmpeg, libs=libs, attachment=attachment)

    def collect_ffmpeg(self) -> FFmpegInfo:
        version = read_ffmpeg_version(self._build_root, self._settings.version_file)
        config = read_ffmpeg_config(self._runner, self._build_root, self._settings.binary_path)
        return FFmpegInfo(version=version, config=config)

    def collect_libraries(self) -> dict[str, str]:
        """Describe every dependency, keyed in enumeration order."""
        if self._max_workers == 1:
            return {spec.name: self._describe(spec) for spec in self._dependencies}

        with ThreadPoolExecutor(max_workers=self._max_workers) as pool:
            futures = [(spec.name, pool.submit(self._describe, spec)) for spec in self._dependencies]
            return {name: future.result() for name, future in futures}

    def attachment_for(self, version: str) -> Attachment:
        return Attachment(
            path=str(self._build_root / self._settings.archive_name),
            filename=self._settings.attachment_filename(version),
        )

    def _describe(self, spec: DependencySpec) -> str:
        return describe_dependency(spec, self._runner, self._build_root)


__all__ = ["BuildInfoAggregator"]
