"""Utility exports."""

from .file_helper import ensure_parent, first_line, write_text
from .logging import configure_logging, get_logger

__all__ = [
    "ensure_parent",
    "first_line",
    "write_text",
    "configure_logging",
    "get_logger",
]
