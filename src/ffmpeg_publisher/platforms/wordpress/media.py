"""WordPress media library upload."""

from __future__ import annotations

import mimetypes
from pathlib import Path

from ..base import MediaUploader, MediaUploadResult
from .api import WordPressApiClient, WordPressApiError


class WordPressMediaUploader(WordPressApiClient, MediaUploader):
    """Uploads build archives to ``/wp-json/wp/v2/media``."""

    def upload(self, path: Path, filename: str) -> MediaUploadResult:
        mime_type = mimetypes.guess_type(filename)[0] or "application/octet-stream"
        headers = {"Content-Disposition": f"form-data; filename={filename}"}

        try:
            stream = path.open("rb")
        except OSError as exc:
            raise WordPressApiError(
                "Cannot open attachment", details={"path": str(path), "reason": str(exc)}
            ) from exc

        with stream:
            files = {"file": (filename, stream, mime_type)}
            response = self._post("media", action="upload media", headers=headers, files=files)

        data = self._decode(response, action="upload media")
        media_id = data.get("id")
        guid = data.get("guid")
        remote_url = guid.get("raw") if isinstance(guid, dict) else None
        if media_id is None or not remote_url:
            raise WordPressApiError(
                "Upload succeeded but the response lacks id or guid.raw",
                details={"path": str(path), "response": data},
            )

        return MediaUploadResult(local_path=path, remote_url=str(remote_url), media_id=int(media_id))
