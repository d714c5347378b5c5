# ExLine: Vim-Style Command-Line Layer for Modal Editing
# Copyright (c) 2025
# TriFactoria (Andrew Blankfield)
#
# Licensed under the Business Source License 1.1 (BSL 1.1).
# You may use, modify, and redistribute this file under the terms of the BSL.
# On the Change Date (2029-01-01), this file will be licensed under
# the Apache License, Version 2.0.

"""
Editing session context passed to every command.

This is a deliberately small document model: a list of lines, a cursor
line and the modal state the status line needs.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path


class Mode(Enum):
    NORMAL = "NORMAL"
    INSERT = "INSERT"
    VISUAL = "VISUAL"
    REPLACE = "REPLACE"
    COMMAND_LINE = "COMMAND_LINE"

    @property
    def tag(self) -> str:
        """Status line tag, empty for Normal mode like Vim."""
        if self in (Mode.NORMAL, Mode.COMMAND_LINE):
            return ""
        return f"-- {self.value} --"


@dataclass
class EditorSession:
    """Editing session context."""

    path: Path | None = None
    lines: list[str] = field(default_factory=lambda: [""])
    cursor: int = 0
    mode: Mode = Mode.NORMAL
    is_recording_macro: bool = False
    modified: bool = False
    running: bool = True
    has_document: bool = True

    @classmethod
    def open(cls, path: Path | None) -> EditorSession:
        """Open a file; a missing file gives an empty buffer."""
        if path is None:
            return cls()
        if path.exists():
            text = path.read_text(encoding="utf-8")
            lines = text.splitlines() or [""]
        else:
            lines = [""]
        return cls(path=path, lines=lines)

    @property
    def last_line(self) -> int:
        return len(self.lines) - 1

    def goto(self, line: int) -> None:
        """Move the cursor, clamped to the buffer."""
        self.cursor = max(0, min(line, self.last_line))

    def delete_lines(self, start: int, end: int) -> None:
        del self.lines[start:end + 1]
        if not self.lines:
            self.lines = [""]
        self.goto(start)
        self.modified = True

    def replace_lines(self, lines: list[str]) -> None:
        if lines != self.lines:
            self.lines = lines or [""]
            self.modified = True
        self.goto(self.cursor)

    def write(self, path: Path | None = None) -> Path:
        target = path or self.path
        if target is None:
            raise ValueError("session has no file name")
        target.write_text("\n".join(self.lines) + "\n", encoding="utf-8")
        if path is None or path == self.path:
            self.modified = False
        return target
