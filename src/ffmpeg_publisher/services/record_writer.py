"""Persistence for the final build record."""

from __future__ import annotations

import json
from pathlib import Path

from ..settings import RECORD_MODE_APPEND, RECORD_MODE_OVERWRITE
from ..utils.file_helper import write_text
from .build_models import BuildRecord


class BuildRecordWriter:
    """Writes ``<attachment filename>.json`` next to the published archive.

    In ``append`` mode a second write to the same path leaves several JSON
    documents back to back, which :meth:`load` refuses to parse.
    """

    def __init__(self, output_dir: Path, *, mode: str = RECORD_MODE_APPEND) -> None:
        if mode not in {RECORD_MODE_APPEND, RECORD_MODE_OVERWRITE}:
            raise ValueError(f"Unsupported record mode: {mode}")
        self._output_dir = output_dir
        self._mode = mode

    def path_for(self, record: BuildRecord) -> Path:
        return self._output_dir / f"{record.attachment.filename}.json"

    def write(self, record: BuildRecord) -> Path:
        path = self.path_for(record)
        text = json.dumps(record.to_dict(), ensure_ascii=False, indent="\t")
        write_text(path, text, append=self._mode == RECORD_MODE_APPEND)
        return path

    @staticmethod
    def load(path: Path) -> BuildRecord:
        data = json.loads(path.read_text(encoding="utf-8"))
        return BuildRecord.from_dict(data)


__all__ = ["BuildRecordWriter"]
