"""WordPress post creation."""

from __future__ import annotations

from typing import Any, Mapping

from ...utils.logging import get_logger
from ..base import PostClient
from .api import WordPressApiClient, WordPressApiError

LOGGER = get_logger(__name__)


class WordPressPostClient(WordPressApiClient, PostClient):
    """Creates posts via ``/wp-json/wp/v2/posts``."""

    def create_post(self, payload: Mapping[str, Any]) -> dict[str, Any]:
        response = self._post("posts", action="create post", json=dict(payload))
        try:
            return self._decode(response, action="create post")
        except WordPressApiError as exc:
            # The post exists once the request succeeds; the body is informational.
            LOGGER.warning(
                "Post created but the response could not be decoded",
                extra={"event": "publish.post", "reason": str(exc)},
            )
            return {}
