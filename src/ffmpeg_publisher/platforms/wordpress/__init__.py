"""WordPress platform adapters."""

from __future__ import annotations

from .api import WordPressApiClient, WordPressApiError
from .media import WordPressMediaUploader
from .posts import WordPressPostClient

__all__ = [
    "WordPressApiClient",
    "WordPressApiError",
    "WordPressMediaUploader",
    "WordPressPostClient",
]
