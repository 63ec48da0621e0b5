"""Filesystem helpers."""

from __future__ import annotations

from pathlib import Path


def ensure_parent(path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    return path


def first_line(text: str) -> str:
    """Return the first line of ``text`` without its terminator."""
    return text.split("\n", 1)[0].rstrip("\r")


def write_text(path: Path, data: str, *, append: bool = False, encoding: str = "utf-8") -> None:
    ensure_parent(path)
    with path.open("a" if append else "w", encoding=encoding) as fp:
        fp.write(data)
