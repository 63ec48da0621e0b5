"""Components that turn a build record into a WordPress post."""

from __future__ import annotations

import html
import json

from .build_models import BuildRecord, PostPayload


class PostContentBuilder:
    """Builds block-editor markup for a release post."""

    def build(self, record: BuildRecord) -> str:
        """
        Render the post body as three Gutenberg blocks.

        Args:
            record: A record whose attachment has already been uploaded.

        Returns:
            A file block linking the uploaded archive, a code block with the
            FFmpeg build configuration, and a striped table with one row per
            library.
        """
        attachment = record.attachment
        if not attachment.uploaded:
            raise ValueError("The attachment must be uploaded before the post content is built.")

        blocks = [
            self._file_block(attachment.id, attachment.url),
            self._code_block(record.ffmpeg.config),
            self._table_block(record.libs),
        ]
        return "\n\n".join(blocks)

    def _file_block(self, media_id: int | None, url: str | None) -> str:
        attrs = json.dumps({"id": media_id, "href": url}, separators=(",", ":"))
        href = html.escape(url or "")
        return (
            f"<!-- wp:file {attrs} -->\n"
            f'<div class="wp-block-file"><a href="{href}" class="wp-block-file__button" download>'
            "Download</a></div>\n"
            "<!-- /wp:file -->"
        )

    def _code_block(self, config: str) -> str:
        code = html.escape(config, quote=False)
        return (
            "<!-- wp:code -->\n"
            f'<pre class="wp-block-code"><code>{code}</code></pre>\n'
            "<!-- /wp:code -->"
        )

    def _table_block(self, libs: dict[str, str]) -> str:
        rows = "".join(
            f"<tr><td>{html.escape(name, quote=False)}</td>"
            f"<td>{html.escape(version, quote=False)}</td></tr>"
            for name, version in libs.items()
        )
        return (
            '<!-- wp:table {"className":"is-style-stripes"} -->\n'
            '<figure class="wp-block-table is-style-stripes"><table>'
            "<thead><tr><th>Library</th><th>Version</th></tr></thead>"
            f"<tbody>{rows}</tbody></table></figure>\n"
            "<!-- /wp:table -->"
        )


class PostPayloadBuilder:
    """Builds the JSON payload for the posts endpoint."""

    def __init__(self, content_builder: PostContentBuilder | None = None) -> None:
        self._content_builder = content_builder or PostContentBuilder()

    def build(self, record: BuildRecord, *, status: str, category: int | str) -> PostPayload:
        return PostPayload(
            title=self.title_for(record),
            content=self._content_builder.build(record),
            status=status,
            categories=[category],
        )

    @staticmethod
    def title_for(record: BuildRecord) -> str:
        return f"FFmpeg {record.ffmpeg.version}"


__all__ = ["PostContentBuilder", "PostPayloadBuilder"]
