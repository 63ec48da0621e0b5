"""Version and configuration collectors for the FFmpeg build tree.

Every collector receives the directory it inspects as an argument; none of
them change the process working directory.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

from ..core.process import ProcessRunner
from ..utils.file_helper import first_line
from ..utils.logging import get_logger

LOGGER = get_logger(__name__)

KIND_GIT = "git"
KIND_SNAPSHOT = "snapshot"
KIND_FIXED = "fixed"

_GIT_DATE_ARGS = ("show", "-s", "--format=%cd", "--date=local", "HEAD")
_UTC_ENV = {"TZ": "UTC0"}


class CollectorError(RuntimeError):
    """Raised when collected text does not have the expected shape."""

    def __init__(self, message: str, *, details: Mapping[str, Any] | None = None) -> None:
        super().__init__(message)
        self.details = dict(details or {})

    def __str__(self) -> str:
        base = super().__str__()
        if not self.details:
            return base
        detail = ", ".join(f"{key}={value!r}" for key, value in self.details.items())
        return f"{base} | {detail}"


@dataclass(slots=True, frozen=True)
class DependencySpec:
    """A build dependency and where its version comes from.

    ``source`` is a path relative to the build root for ``git`` and
    ``snapshot`` dependencies, and the literal version for ``fixed`` ones.
    """

    name: str
    kind: str
    source: str


DEFAULT_DEPENDENCIES: tuple[DependencySpec, ...] = (
    DependencySpec("aom", KIND_GIT, "aom/aom"),
    DependencySpec("openh264", KIND_GIT, "openh264/openh264"),
    DependencySpec("x264", KIND_GIT, "x264/x264"),
    DependencySpec("x265", KIND_GIT, "x265/x265_git"),
    DependencySpec("vpx", KIND_GIT, "vpx/libvpx"),
    DependencySpec("lame", KIND_FIXED, "3.100"),
    DependencySpec("opus", KIND_FIXED, "1.3.1"),
    DependencySpec("vorbis", KIND_GIT, "vorbis/vorbis"),
    DependencySpec("svt-av1", KIND_GIT, "svt-av1/SVT-AV1"),
    DependencySpec("libass", KIND_GIT, "libass/libass"),
    DependencySpec("soxr", KIND_GIT, "soxr/soxr"),
    DependencySpec("openjpeg", KIND_GIT, "openjpeg/openjpeg"),
    DependencySpec("avisynth+", KIND_GIT, "avisynthplus/AviSynthPlus"),
    DependencySpec("xvid", KIND_SNAPSHOT, "xvid"),
)


def read_ffmpeg_version(build_root: Path, version_file: str = "ffmpeg/ffmpeg/VERSION") -> str:
    """Return the first line of the FFmpeg version file."""
    path = build_root / version_file
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise CollectorError("Cannot read FFmpeg version file", details={"path": str(path)}) from exc
    version = first_line(text)
    if not version:
        raise CollectorError("FFmpeg version file is empty", details={"path": str(path)})
    return version


def read_ffmpeg_config(
    runner: ProcessRunner,
    build_root: Path,
    binary_path: str = "out/bin/ffmpeg",
) -> str:
    """Return the build configuration lines printed by a bare ``ffmpeg`` call.

    Without arguments ffmpeg prints its banner to stderr and exits with a
    non-zero status; lines two and three hold the compiler and configure
    flags.
    """
    binary = build_root / binary_path
    result = runner.run(str(binary), cwd=build_root, capture_stderr=True)
    lines = result.output.split("\n")
    if len(lines) < 2 or not lines[1].strip():
        raise CollectorError(
            "Unexpected output from ffmpeg",
            details={"binary": str(binary), "returncode": result.returncode, "output": result.output[:200]},
        )
    return "\n".join(line.rstrip("\r") for line in lines[1:3])


def git_version(runner: ProcessRunner, checkout: Path) -> str:
    """Describe a git checkout by the committer date of ``HEAD`` in UTC."""
    result = runner.run("git", _GIT_DATE_ARGS, cwd=checkout, env=_UTC_ENV).check()
    date = first_line(result.output).strip()
    if not date:
        raise CollectorError("git returned no commit date", details={"checkout": str(checkout)})
    return f"master ({date} UTC)"


def snapshot_version(directory: Path) -> str:
    """Describe a plain source snapshot by the first entry in its directory."""
    try:
        entries = sorted(entry.name for entry in directory.iterdir() if not entry.name.startswith("."))
    except OSError as exc:
        raise CollectorError("Cannot list snapshot directory", details={"path": str(directory)}) from exc
    if not entries:
        raise CollectorError("Snapshot directory is empty", details={"path": str(directory)})
    return f"snapshot ({entries[0]})"


def describe_dependency(spec: DependencySpec, runner: ProcessRunner, build_root: Path) -> str:
    if spec.kind == KIND_FIXED:
        return spec.source
    if spec.kind == KIND_GIT:
        return git_version(runner, build_root / spec.source)
    if spec.kind == KIND_SNAPSHOT:
        return snapshot_version(build_root / spec.source)
    raise ValueError(f"Unsupported dependency kind: {spec.kind}")


__all__ = [
    "CollectorError",
    "DEFAULT_DEPENDENCIES",
    "DependencySpec",
    "KIND_FIXED",
    "KIND_GIT",
    "KIND_SNAPSHOT",
    "describe_dependency",
    "git_version",
    "read_ffmpeg_config",
    "read_ffmpeg_version",
    "snapshot_version",
]
