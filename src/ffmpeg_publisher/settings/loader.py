"""Helpers for loading the publisher configuration."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

from ..security import ChainedSecretProvider, EnvSecretProvider, MappingSecretProvider

DEFAULT_CONFIG_NAME = "config.json"
CONFIG_ENV_VAR = "FFPUB_CONFIG"
SECRET_ENV_PREFIX = "FFPUB_"

DEFAULT_REPO_URL = "http://github.com/ixnas/ffmpeg-apple-arm64-build"
DEFAULT_CHECKOUT_DIR = "ffmpeg-apple-arm64-build"
DEFAULT_POST_STATUS = "publish"

RECORD_MODE_APPEND = "append"
RECORD_MODE_OVERWRITE = "overwrite"
_RECORD_MODES = {RECORD_MODE_APPEND, RECORD_MODE_OVERWRITE}


@dataclass(slots=True, frozen=True)
class PublishSettings:
    """Remote WordPress site and credentials."""

    url: str
    username: str
    password: str
    category: int | str
    status: str = DEFAULT_POST_STATUS
    timeout: float = 60.0

    @property
    def auth(self) -> tuple[str, str]:
        return (self.username, self.password)


@dataclass(slots=True, frozen=True)
class BuildSettings:
    """Layout of the cloned build-script tree."""

    repo_url: str = DEFAULT_REPO_URL
    clone_depth: int = 1
    checkout_dir: str = DEFAULT_CHECKOUT_DIR
    build_script: str = "./build.sh"
    binary_path: str = "out/bin/ffmpeg"
    version_file: str = "ffmpeg/ffmpeg/VERSION"
    archive_name: str = "ffmpeg-success.zip"
    attachment_prefix: str = "ffmpeg-apple-arm64-"

    def attachment_filename(self, version: str) -> str:
        return f"{self.attachment_prefix}{version}.zip"


@dataclass(slots=True, frozen=True)
class PathSettings:
    root_dir: Path
    log_file: Path
    state_dir: Path

    def build_root(self, build: BuildSettings) -> Path:
        return self.root_dir / build.checkout_dir


@dataclass(slots=True, frozen=True)
class AppConfig:
    publish: PublishSettings
    build: BuildSettings
    paths: PathSettings
    record_mode: str = RECORD_MODE_APPEND
    collector_workers: int = 1

    @property
    def build_root(self) -> Path:
        return self.paths.build_root(self.build)


def _config_path(explicit: str | os.PathLike[str] | None, env: Mapping[str, str]) -> Path:
    if explicit:
        candidate = Path(explicit)
    else:
        env_value = env.get(CONFIG_ENV_VAR)
        candidate = Path(env_value) if env_value else Path(DEFAULT_CONFIG_NAME)
    return candidate if candidate.is_absolute() else Path.cwd() / candidate


def _load_json(path: Path) -> dict[str, Any]:
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")
    with path.open("r", encoding="utf-8") as fp:
        data = json.load(fp)
    if not isinstance(data, dict):
        raise ValueError(f"Config file {path} must contain a JSON object")
    return data


def _to_path(value: Any | None, *, base: Path, fallback: Path) -> Path:
    if not value:
        return fallback
    candidate = Path(str(value))
    return candidate if candidate.is_absolute() else base / candidate


def _category(value: Any) -> int | str:
    if isinstance(value, bool):
        return str(value)
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return "" if value is None else str(value)


def _record_mode(value: Any) -> str:
    mode = str(value or RECORD_MODE_APPEND).lower()
    if mode not in _RECORD_MODES:
        raise ValueError(f"Unknown record_mode '{value}', expected one of {sorted(_RECORD_MODES)}")
    return mode


def load_config(
    config_path: str | os.PathLike[str] | None = None,
    *,
    env: Mapping[str, str] | None = None,
) -> AppConfig:
    environ = env if env is not None else os.environ
    path = _config_path(config_path, environ)
    data = _load_json(path)

    secrets = ChainedSecretProvider(
        [EnvSecretProvider(SECRET_ENV_PREFIX, env=environ), MappingSecretProvider(data)]
    )

    config_dir = path.parent
    root_dir = _to_path(data.get("root_dir"), base=config_dir, fallback=config_dir)
    log_file = _to_path(data.get("log_file"), base=root_dir, fallback=root_dir / "out.log")
    state_dir = _to_path(data.get("state_dir"), base=root_dir, fallback=root_dir / ".state")

    publish = PublishSettings(
        url=str(data.get("url", "")).rstrip("/"),
        username=secrets.get_secret_or("username", ""),
        password=secrets.get_secret_or("password", ""),
        category=_category(data.get("category")),
        status=str(data.get("status", DEFAULT_POST_STATUS)),
        timeout=float(data.get("timeout", 60)),
    )

    build = BuildSettings(
        repo_url=str(data.get("repo_url", DEFAULT_REPO_URL)),
        checkout_dir=str(data.get("checkout_dir", DEFAULT_CHECKOUT_DIR)),
        build_script=str(data.get("build_script", "./build.sh")),
    )

    return AppConfig(
        publish=publish,
        build=build,
        paths=PathSettings(root_dir=root_dir, log_file=log_file, state_dir=state_dir),
        record_mode=_record_mode(data.get("record_mode")),
        collector_workers=max(1, int(data.get("collector_workers", 1))),
    )
