"""Tests for the upload-then-post workflow."""

from __future__ import annotations

from pathlib import Path

from ffmpeg_publisher.platforms import MediaUploadResult
from ffmpeg_publisher.services import Attachment, BuildRecord, FFmpegInfo, ReleasePublishWorkflow
from ffmpeg_publisher.settings import PublishSettings


class StubUploader:
    def __init__(self) -> None:
        self.calls: list[tuple[Path, str]] = []

    def upload(self, path: Path, filename: str) -> MediaUploadResult:
        self.calls.append((path, filename))
        return MediaUploadResult(local_path=path, remote_url="https://blog.example.org/f.zip", media_id=42)


class StubPostClient:
    def __init__(self) -> None:
        self.payloads: list[dict[str, object]] = []

    def create_post(self, payload):
        self.payloads.append(dict(payload))
        return {"id": 99}


def _settings() -> PublishSettings:
    return PublishSettings(url="https://blog.example.org", username="u", password="p", category=7)


def _record(tmp_path: Path) -> BuildRecord:
    return BuildRecord(
        ffmpeg=FFmpegInfo(version="6.0", config="a\nb"),
        libs={"lame": "3.100"},
        attachment=Attachment(path=str(tmp_path / "ffmpeg-success.zip"), filename="ffmpeg-apple-arm64-6.0.zip"),
    )


def test_upload_merges_remote_identifiers(tmp_path: Path) -> None:
    uploader = StubUploader()
    workflow = ReleasePublishWorkflow(uploader, StubPostClient(), _settings())
    record = _record(tmp_path)

    workflow.upload_attachment(record)

    assert uploader.calls == [(tmp_path / "ffmpeg-success.zip", "ffmpeg-apple-arm64-6.0.zip")]
    assert record.attachment.id == 42
    assert record.attachment.url == "https://blog.example.org/f.zip"


def test_create_post_stores_payload_on_record(tmp_path: Path) -> None:
    post_client = StubPostClient()
    workflow = ReleasePublishWorkflow(StubUploader(), post_client, _settings())
    record = _record(tmp_path)
    workflow.upload_attachment(record)

    response = workflow.create_post(record)

    assert response == {"id": 99}
    assert record.post is not None
    assert record.post.title == "FFmpeg 6.0"
    assert post_client.payloads == [record.post.to_dict()]
    assert post_client.payloads[0]["categories"] == [7]


def test_dry_run_skips_remote_calls(tmp_path: Path) -> None:
    uploader = StubUploader()
    post_client = StubPostClient()
    workflow = ReleasePublishWorkflow(uploader, post_client, _settings())
    record = _record(tmp_path)

    workflow.upload_attachment(record, dry_run=True)
    workflow.create_post(record, dry_run=True)

    assert uploader.calls == []
    assert post_client.payloads == []
    assert record.attachment.id == 0
    assert record.attachment.url.startswith("file://")
    assert record.post is not None
