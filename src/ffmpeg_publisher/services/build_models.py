"""Data models describing one build and its publication."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(slots=True)
class FFmpegInfo:
    version: str
    config: str


@dataclass(slots=True)
class Attachment:
    """The build archive; ``id`` and ``url`` are filled in after upload."""

    path: str
    filename: str
    id: int | None = None
    url: str | None = None

    @property
    def uploaded(self) -> bool:
        return self.id is not None and self.url is not None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"path": self.path, "filename": self.filename}
        if self.id is not None:
            data["id"] = self.id
        if self.url is not None:
            data["url"] = self.url
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Attachment":
        return cls(
            path=str(data["path"]),
            filename=str(data["filename"]),
            id=data.get("id"),
            url=data.get("url"),
        )


@dataclass(slots=True)
class PostPayload:
    """Body submitted to the posts endpoint."""

    title: str
    content: str
    status: str
    categories: list[int | str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "content": self.content,
            "status": self.status,
            "categories": list(self.categories),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PostPayload":
        return cls(
            title=str(data["title"]),
            content=str(data["content"]),
            status=str(data["status"]),
            categories=list(data.get("categories", [])),
        )


@dataclass(slots=True)
class BuildRecord:
    """Aggregated description of one run's artifact and publication result."""

    ffmpeg: FFmpegInfo
    libs: dict[str, str]
    attachment: Attachment
    post: PostPayload | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "ffmpeg": {"version": self.ffmpeg.version, "config": self.ffmpeg.config},
            "libs": dict(self.libs),
            "attachment": self.attachment.to_dict(),
        }
        if self.post is not None:
            data["post"] = self.post.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "BuildRecord":
        ffmpeg = data["ffmpeg"]
        post = data.get("post")
        return cls(
            ffmpeg=FFmpegInfo(version=str(ffmpeg["version"]), config=str(ffmpeg["config"])),
            libs={str(name): str(version) for name, version in data.get("libs", {}).items()},
            attachment=Attachment.from_dict(data["attachment"]),
            post=PostPayload.from_dict(post) if post else None,
        )
