"""Tests for the individual version and configuration collectors."""

from __future__ import annotations

import os
import shutil
import subprocess
from pathlib import Path

import pytest

from ffmpeg_publisher.collectors import (
    CollectorError,
    DEFAULT_DEPENDENCIES,
    git_version,
    read_ffmpeg_config,
    read_ffmpeg_version,
    snapshot_version,
)
from ffmpeg_publisher.collectors.versions import describe_dependency
from ffmpeg_publisher.core import ProcessError, ProcessResult, ProcessRunner


class StubRunner:
    def __init__(self, output: str = "", *, returncode: int = 0) -> None:
        self.output = output
        self.returncode = returncode
        self.calls: list[dict[str, object]] = []

    def run(self, command, args=None, *, cwd=None, echo=False, capture_stderr=False, env=None):
        self.calls.append(
            {"command": command, "args": tuple(args or ()), "cwd": cwd, "env": env, "capture_stderr": capture_stderr}
        )
        return ProcessResult(
            args=(command, *(args or ())),
            returncode=self.returncode,
            stdout=self.output,
            stderr="",
            output=self.output,
        )


def _write_script(path: Path, body: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("#!/bin/sh\n" + body, encoding="utf-8")
    path.chmod(0o755)
    return path


def test_version_is_first_line_of_version_file(tmp_path: Path) -> None:
    version_file = tmp_path / "ffmpeg" / "ffmpeg" / "VERSION"
    version_file.parent.mkdir(parents=True)
    version_file.write_text("6.0\nignored\n", encoding="utf-8")

    assert read_ffmpeg_version(tmp_path) == "6.0"


def test_version_line_is_kept_verbatim(tmp_path: Path) -> None:
    version_file = tmp_path / "ffmpeg" / "ffmpeg" / "VERSION"
    version_file.parent.mkdir(parents=True)
    version_file.write_text(" n6.1-dev \n", encoding="utf-8")

    assert read_ffmpeg_version(tmp_path) == " n6.1-dev "


def test_missing_version_file_raises(tmp_path: Path) -> None:
    with pytest.raises(CollectorError):
        read_ffmpeg_version(tmp_path)


@pytest.mark.skipif(os.name == "nt", reason="requires a POSIX shell")
def test_config_keeps_lines_two_and_three(tmp_path: Path) -> None:
    _write_script(
        tmp_path / "out" / "bin" / "ffmpeg",
        "printf 'ffmpeg version 6.0\\n  built with clang\\n  configuration: --enable-gpl\\nHyper fast Audio and Video encoder\\n' >&2\nexit 1\n",
    )
    runner = ProcessRunner(tmp_path / "out.log")

    config = read_ffmpeg_config(runner, tmp_path)

    assert config == "  built with clang\n  configuration: --enable-gpl"


def test_config_with_too_little_output_raises(tmp_path: Path) -> None:
    runner = StubRunner("only one line")

    with pytest.raises(CollectorError):
        read_ffmpeg_config(runner, tmp_path)

    assert runner.calls[0]["capture_stderr"] is True


def test_git_version_forces_utc_and_formats_descriptor(tmp_path: Path) -> None:
    runner = StubRunner("Mon Jan 2 01:04:05 2023\n")

    described = git_version(runner, tmp_path / "aom" / "aom")

    assert described == "master (Mon Jan 2 01:04:05 2023 UTC)"
    call = runner.calls[0]
    assert call["command"] == "git"
    assert call["args"] == ("show", "-s", "--format=%cd", "--date=local", "HEAD")
    assert call["cwd"] == tmp_path / "aom" / "aom"
    assert call["env"] == {"TZ": "UTC0"}


def test_git_version_fails_on_error_status(tmp_path: Path) -> None:
    runner = StubRunner("", returncode=128)

    with pytest.raises(ProcessError):
        git_version(runner, tmp_path)


@pytest.mark.skipif(shutil.which("git") is None, reason="git is not installed")
def test_git_version_against_real_checkout(tmp_path: Path) -> None:
    checkout = tmp_path / "vorbis"
    checkout.mkdir()
    env = dict(os.environ)
    env.update(
        {
            "GIT_AUTHOR_NAME": "builder",
            "GIT_AUTHOR_EMAIL": "builder@example.invalid",
            "GIT_COMMITTER_NAME": "builder",
            "GIT_COMMITTER_EMAIL": "builder@example.invalid",
            "GIT_AUTHOR_DATE": "2023-01-02T03:04:05+02:00",
            "GIT_COMMITTER_DATE": "2023-01-02T03:04:05+02:00",
        }
    )
    subprocess.run(["git", "init", "-q"], cwd=checkout, env=env, check=True)
    subprocess.run(
        ["git", "-c", "commit.gpgsign=false", "commit", "-q", "--allow-empty", "-m", "init"],
        cwd=checkout,
        env=env,
        check=True,
    )
    runner = ProcessRunner(tmp_path / "out.log")

    assert git_version(runner, checkout) == "master (Mon Jan 2 01:04:05 2023 UTC)"


def test_snapshot_uses_first_sorted_entry(tmp_path: Path) -> None:
    snapshot = tmp_path / "xvid"
    snapshot.mkdir()
    (snapshot / "xvidcore-1.3.7").mkdir()
    (snapshot / "zzz.tar.gz").write_bytes(b"")
    (snapshot / ".hidden").write_bytes(b"")

    assert snapshot_version(snapshot) == "snapshot (xvidcore-1.3.7)"


def test_snapshot_of_empty_or_missing_directory_raises(tmp_path: Path) -> None:
    empty = tmp_path / "empty"
    empty.mkdir()

    with pytest.raises(CollectorError):
        snapshot_version(empty)
    with pytest.raises(CollectorError):
        snapshot_version(tmp_path / "missing")


def test_fixed_dependencies_use_literal_versions(tmp_path: Path) -> None:
    runner = StubRunner()
    fixed = {spec.name: spec for spec in DEFAULT_DEPENDENCIES if spec.kind == "fixed"}

    assert describe_dependency(fixed["lame"], runner, tmp_path) == "3.100"
    assert describe_dependency(fixed["opus"], runner, tmp_path) == "1.3.1"
    assert runner.calls == []


def test_default_dependency_order_is_stable() -> None:
    assert [spec.name for spec in DEFAULT_DEPENDENCIES] == [
        "aom",
        "openh264",
        "x264",
        "x265",
        "vpx",
        "lame",
        "opus",
        "vorbis",
        "svt-av1",
        "libass",
        "soxr",
        "openjpeg",
        "avisynth+",
        "xvid",
    ]


def test_collectors_leave_working_directory_untouched(tmp_path: Path) -> None:
    before = os.getcwd()
    snapshot = tmp_path / "xvid"
    snapshot.mkdir()
    (snapshot / "xvidcore").mkdir()

    snapshot_version(snapshot)
    git_version(StubRunner("Mon Jan 2 01:04:05 2023"), tmp_path)
    with pytest.raises(CollectorError):
        snapshot_version(tmp_path / "missing")
    with pytest.raises(CollectorError):
        read_ffmpeg_version(tmp_path)

    assert os.getcwd() == before
