"""Platform integration package."""

from __future__ import annotations

from .base import MediaUploader, MediaUploadResult, PostClient

__all__ = [
    "MediaUploadResult",
    "MediaUploader",
    "PostClient",
]
