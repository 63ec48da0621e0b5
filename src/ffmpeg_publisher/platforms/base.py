"""Base contracts for content publishing platforms."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Protocol


@dataclass(slots=True)
class MediaUploadResult:
    """Represents the outcome of a single media upload."""

    local_path: Path
    remote_url: str
    media_id: int


class MediaUploader(Protocol):
    """Uploads a file to a remote media library."""

    def upload(self, path: Path, filename: str) -> MediaUploadResult:
        """Upload ``path`` under ``filename`` and return the remote identifiers."""


class PostClient(Protocol):
    """Creates content entries on a remote platform."""

    def create_post(self, payload: Mapping[str, Any]) -> dict[str, Any]:
        """Submit ``payload`` and return the decoded platform response."""
