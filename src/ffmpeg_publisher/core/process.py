"""Subprocess execution with a shared append-only output log."""

from __future__ import annotations

import codecs
import os
import subprocess
import sys
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import IO, Any, Callable, Mapping, Sequence, TextIO

from ..utils.file_helper import ensure_parent
from ..utils.logging import get_logger

LOGGER = get_logger(__name__)

_CHUNK_SIZE = 8192


class ProcessError(RuntimeError):
    """Raised when a command cannot be launched or exits unsuccessfully."""

    def __init__(
        self,
        message: str,
        *,
        args: Sequence[str] = (),
        returncode: int | None = None,
        output: str = "",
    ) -> None:
        super().__init__(message)
        self.command = tuple(args)
        self.returncode = returncode
        self.output = output

    def __str__(self) -> str:
        base = super().__str__()
        parts = [base]
        if self.command:
            parts.append(f"command: {' '.join(self.command)}")
        if self.returncode is not None:
            parts.append(f"exit status: {self.returncode}")
        return " | ".join(parts)


@dataclass(slots=True)
class ProcessResult:
    """Outcome of a single command invocation."""

    args: tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str
    output: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    def check(self) -> "ProcessResult":
        """Return ``self`` or raise :class:`ProcessError` on a non-zero exit status."""
        if not self.ok:
            raise ProcessError(
                "Command exited with a non-zero status",
                args=self.args,
                returncode=self.returncode,
                output=self.output,
            )
        return self


class ProcessRunner:
    """Runs external commands and appends every byte they print to ``log_path``."""

    def __init__(self, log_path: Path, *, console: TextIO | None = None) -> None:
        self._log_path = log_path
        self._console = console
        self._lock = threading.Lock()

    @property
    def log_path(self) -> Path:
        return self._log_path

    def run(
        self,
        command: str,
        args: Sequence[str] | None = None,
        *,
        cwd: Path | None = None,
        echo: bool = False,
        capture_stderr: bool = False,
        env: Mapping[str, str] | None = None,
    ) -> ProcessResult:
        argv = (command, *(args or ()))
        child_env: dict[str, str] | None = None
        if env:
            child_env = dict(os.environ)
            child_env.update(env)

        LOGGER.debug(
            "Running command",
            extra={"event": "process.start", "argv": list(argv), "cwd": str(cwd) if cwd else None},
        )
        try:
            log = ensure_parent(self._log_path).open("ab")
        except OSError as exc:
            raise ProcessError(f"Cannot open process log {self._log_path}: {exc}", args=argv) from exc

        with log:
            try:
                proc = subprocess.Popen(
                    argv,
                    cwd=str(cwd) if cwd else None,
                    env=child_env,
                    stdin=subprocess.DEVNULL,
                    stdout=subprocess.PIPE,
                    stderr=subprocess.PIPE,
                )
            except OSError as exc:
                raise ProcessError(f"Failed to launch command: {exc}", args=argv) from exc

            stdout_chunks: list[bytes] = []
            stderr_chunks: list[bytes] = []
            combined: list[bytes] = []
            log_errors: list[OSError] = []

            def on_stdout(chunk: bytes) -> None:
                stdout_chunks.append(chunk)
                combined.append(chunk)

            def on_stderr(chunk: bytes) -> None:
                stderr_chunks.append(chunk)
                combined.append(chunk)

            readers = [
                threading.Thread(
                    target=self._drain,
                    args=(proc.stdout, on_stdout, log, log_errors, echo),
                    daemon=True,
                ),
                threading.Thread(
                    target=self._drain,
                    args=(proc.stderr, on_stderr, log, log_errors, echo),
                    daemon=True,
                ),
            ]
            for reader in readers:
                reader.start()
            for reader in readers:
                reader.join()
            returncode = proc.wait()

        if log_errors:
            LOGGER.warning(
                "Process output could not be fully written to the log",
                extra={
                    "event": "process.log_error",
                    "argv": list(argv),
                    "log_file": str(self._log_path),
                    "reason": str(log_errors[0]),
                },
            )

        stdout = _decode(stdout_chunks)
        stderr = _decode(stderr_chunks)
        output = _decode(combined) if capture_stderr else stdout

        LOGGER.debug(
            "Command finished",
            extra={"event": "process.exit", "argv": list(argv), "returncode": returncode},
        )
        return ProcessResult(
            args=argv,
            returncode=returncode,
            stdout=stdout,
            stderr=stderr,
            output=output,
        )

    def _drain(
        self,
        stream: IO[bytes] | None,
        sink: Callable[[bytes], None],
        log: IO[bytes],
        log_errors: list[OSError],
        echo: bool,
    ) -> None:
        if stream is None:
            return
        # Multi-byte characters may straddle two reads.
        decoder = codecs.getincrementaldecoder("utf-8")(errors="replace") if echo else None
        with stream:
            for chunk in iter(lambda: stream.read1(_CHUNK_SIZE), b""):
                self._record(chunk, sink, log, log_errors, decoder)
            if decoder is not None:
                with self._lock:
                    self._echo(decoder.decode(b"", final=True))

    def _record(
        self,
        chunk: bytes,
        sink: Callable[[bytes], None],
        log: IO[bytes],
        log_errors: list[OSError],
        decoder: codecs.IncrementalDecoder | None,
    ) -> None:
        with self._lock:
            sink(chunk)
            if not log_errors:
                try:
                    log.write(chunk)
                    log.flush()
                except OSError as exc:
                    log_errors.append(exc)
            if decoder is not None:
                self._echo(decoder.decode(chunk))

    def _echo(self, text: str) -> None:
        if not text:
            return
        console: Any = self._console or sys.stdout
        console.write(text)
        console.flush()


def _decode(chunks: list[bytes]) -> str:
    return b"".join(chunks).decode("utf-8", errors="replace")


__all__ = ["ProcessError", "ProcessResult", "ProcessRunner"]
