"""Workflow for uploading a build archive and announcing it in a post."""

from __future__ import annotations

from pathlib import Path

from ..platforms import MediaUploader, MediaUploadResult, PostClient
from ..settings import PublishSettings
from ..utils.logging import get_logger
from .build_models import BuildRecord
from .post_components import PostPayloadBuilder

LOGGER = get_logger(__name__)

DRY_RUN_MEDIA_ID = 0


class ReleasePublishWorkflow:
    """Coordinates media upload and post submission for one build record."""

    def __init__(
        self,
        media_uploader: MediaUploader,
        post_client: PostClient,
        settings: PublishSettings,
        payload_builder: PostPayloadBuilder | None = None,
    ) -> None:
        self._media_uploader = media_uploader
        self._post_client = post_client
        self._settings = settings
        self._payload_builder = payload_builder or PostPayloadBuilder()

    def upload_attachment(self, record: BuildRecord, *, dry_run: bool = False) -> MediaUploadResult:
        """Upload the archive and merge its remote id and URL into ``record``."""
        attachment = record.attachment
        path = Path(attachment.path)
        if dry_run:
            result = MediaUploadResult(
                local_path=path,
                remote_url=path.absolute().as_uri(),
                media_id=DRY_RUN_MEDIA_ID,
            )
        else:
            result = self._media_uploader.upload(path, attachment.filename)

        attachment.id = result.media_id
        attachment.url = result.remote_url
        LOGGER.info(
            "Attachment uploaded",
            extra={
                "event": "publish.upload",
                "media_id": result.media_id,
                "url": result.remote_url,
                "dry_run": dry_run,
            },
        )
        return result

    def create_post(self, record: BuildRecord, *, dry_run: bool = False) -> dict[str, object]:
        """Attach the post payload to ``record`` and submit it."""
        payload = self._payload_builder.build(
            record,
            status=self._settings.status,
            category=self._settings.category,
        )
        record.post = payload

        if dry_run:
            response: dict[str, object] = {}
        else:
            response = self._post_client.create_post(payload.to_dict())
        LOGGER.info(
            "Post submitted",
            extra={
                "event": "publish.post",
                "title": payload.title,
                "post_id": response.get("id"),
                "dry_run": dry_run,
            },
        )
        return response


__all__ = ["ReleasePublishWorkflow"]
