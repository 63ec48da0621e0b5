"""Core primitives for running external commands."""

from .process import ProcessError, ProcessResult, ProcessRunner

__all__ = [
    "ProcessError",
    "ProcessResult",
    "ProcessRunner",
]
