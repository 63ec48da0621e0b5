"""Services that shape and publish build records."""

from __future__ import annotations

from .build_models import Attachment, BuildRecord, FFmpegInfo, PostPayload
from .post_components import PostContentBuilder, PostPayloadBuilder
from .publish_workflow import ReleasePublishWorkflow
from .record_writer import BuildRecordWriter

__all__ = [
    "Attachment",
    "BuildRecord",
    "BuildRecordWriter",
    "FFmpegInfo",
    "PostContentBuilder",
    "PostPayload",
    "PostPayloadBuilder",
    "ReleasePublishWorkflow",
]
