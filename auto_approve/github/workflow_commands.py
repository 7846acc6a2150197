"""Workflow command output and job step summary.

Writes ``::warning::``/``::notice::``/``::error::`` commands that the runner
turns into annotations, and appends markdown to the file named by
``GITHUB_STEP_SUMMARY``.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import List, Optional, TextIO

from auto_approve.common.logging import get_logger

logger = get_logger(__name__)


def escape_data(value: str) -> str:
    return value.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


def format_command(command: str, message: str) -> str:
    """Render a single workflow command line.

    Example:
        >>> format_command("warning", "50% done")
        '::warning::50%25 done'
    """
    return f"::{command}::{escape_data(message)}"


class WorkflowCommands:
    """Emit workflow commands to a stream (stdout by default)."""

    def __init__(self, stream: Optional[TextIO] = None):
        self._stream = stream

    @property
    def stream(self) -> TextIO:
        return self._stream or sys.stdout

    def _write(self, line: str) -> None:
        self.stream.write(line + "\n")
        self.stream.flush()

    def info(self, message: str) -> None:
        self._write(message)

    def notice(self, message: str) -> None:
        self._write(format_command("notice", message))

    def warning(self, message: str) -> None:
        self._write(format_command("warning", message))

    def error(self, message: str) -> None:
        self._write(format_command("error", message))


class StepSummary:
    """Buffer markdown and append it to the job step summary file.

    When ``GITHUB_STEP_SUMMARY`` is not set (local runs) ``write`` logs and
    returns False instead of raising.
    """

    def __init__(self, path: Optional[str] = None):
        self._path = path
        self._buffer: List[str] = []

    @property
    def path(self) -> Optional[str]:
        return self._path or os.getenv("GITHUB_STEP_SUMMARY") or None

    @property
    def content(self) -> str:
        return "".join(self._buffer)

    def add_heading(self, text: str) -> "StepSummary":
        self._buffer.append(f"# {text}\n")
        return self

    def add_quote(self, text: str) -> "StepSummary":
        quoted = "\n".join(f"> {line}" for line in text.splitlines() or [""])
        self._buffer.append(f"{quoted}\n")
        return self

    def write(self) -> bool:
        path = self.path
        if not path:
            logger.info("GITHUB_STEP_SUMMARY not set, skipping step summary")
            return False
        try:
            with Path(path).open("a", encoding="utf-8") as handle:
                handle.write(self.content)
        except OSError as exc:
            logger.warning("Failed to write step summary", extra={"path": path, "error": str(exc)})
            return False
        self._buffer.clear()
        return True
