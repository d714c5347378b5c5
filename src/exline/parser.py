# ExLine: Vim-Style Command-Line Layer for Modal Editing
# Copyright (c) 2025
# TriFactoria (Andrew Blankfield)
#
# Licensed under the Business Source License 1.1 (BSL 1.1).
# You may use, modify, and redistribute this file under the terms of the BSL.
# On the Change Date (2029-01-01), this file will be licensed under
# the Apache License, Version 2.0.

"""
Minimal Ex command parser.

Grammar: [range] [name][!] [args]

- range: N, ., $, % or A,B with A/B one of N . $
- names may be abbreviated down to their minimum form (w, q, d, noh ...)
- a range without a name moves the cursor (:12, :$)

Anything the table does not know raises VimError(E492) so the command line
can hand it to the fallback engine.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path

from .errors import ErrorCode, VimError
from .session import EditorSession

_COMMAND_RE = re.compile(
    r"^\s*"
    r"(?P<range>(?:\d+|[.$%])(?:\s*,\s*(?:\d+|[.$]))?)?"
    r"\s*(?P<name>[A-Za-z]*)"
    r"(?P<bang>!?)"
    r"\s*(?P<args>.*?)\s*$"
)


@dataclass(frozen=True)
class LineRange:
    start: str
    end: str

    @classmethod
    def parse(cls, raw: str | None) -> LineRange | None:
        if not raw:
            return None
        if raw == "%":
            return cls("1", "$")
        parts = [p.strip() for p in raw.split(",")]
        if len(parts) == 1:
            return cls(parts[0], parts[0])
        return cls(parts[0], parts[1])

    @staticmethod
    def address(token: str, session: EditorSession) -> int:
        if token == ".":
            return session.cursor
        if token == "$":
            return session.last_line
        # Ex addresses are 1-based; :0 means the first line
        return max(int(token), 1) - 1

    def resolve(self, session: EditorSession) -> tuple[int, int]:
        """Return 0-based (start, end), raising E16 when out of bounds."""
        start = self.address(self.start, session)
        end = self.address(self.end, session)
        if start > end:
            start, end = end, start
        if end > session.last_line:
            raise VimError(ErrorCode.E16)
        return (start, end)


# ----------------------------------------------------------------
# Native commands
# ----------------------------------------------------------------


@dataclass
class GotoLineCommand:
    line_range: LineRange
    delegable: bool = True

    async def execute(self, session: EditorSession) -> None:
        # :N beyond the buffer jumps to the last line, unlike :d
        target = LineRange.address(self.line_range.end, session)
        session.goto(target)


@dataclass
class DeleteCommand:
    line_range: LineRange | None = None
    count: int | None = None
    delegable: bool = True

    async def execute(self, session: EditorSession) -> None:
        if self.line_range is None:
            start = end = session.cursor
        else:
            start, end = self.line_range.resolve(session)
        if self.count is not None:
            start = end
            end = min(start + self.count - 1, session.last_line)
        session.delete_lines(start, end)


@dataclass
class WriteCommand:
    path: Path | None = None
    force: bool = False
    quit_after: bool = False
    only_if_modified: bool = False
    delegable: bool = False

    async def execute(self, session: EditorSession) -> None:
        if self.path is None and session.path is None:
            raise VimError(ErrorCode.E32)
        if not (self.only_if_modified and not session.modified):
            try:
                session.write(self.path)
            except OSError as e:
                raise VimError(
                    ErrorCode.E212, str(self.path or session.path)
                ) from e
        if self.quit_after:
            session.running = False


@dataclass
class QuitCommand:
    force: bool = False
    delegable: bool = False

    async def execute(self, session: EditorSession) -> None:
        if session.modified and not self.force:
            raise VimError(ErrorCode.E37)
        session.running = False


@dataclass
class NohlsearchCommand:
    delegable: bool = True

    async def execute(self, session: EditorSession) -> None:
        # No search highlighting in this session model
        return None


# ----------------------------------------------------------------
# Parser
# ----------------------------------------------------------------


# (full name, shortest accepted abbreviation)
COMMAND_NAMES: list[tuple[str, str]] = [
    ("delete", "d"),
    ("nohlsearch", "noh"),
    ("quit", "q"),
    ("write", "w"),
    ("wq", "wq"),
    ("xit", "x"),
]


def resolve_name(name: str) -> str | None:
    """Map an abbreviation to its full command name."""
    for full, short in COMMAND_NAMES:
        if full.startswith(name) and len(name) >= len(short):
            return full
    return None


class CommandParser:
    """Parser protocol implementation for the built-in commands."""

    def parse(self, text: str):
        m = _COMMAND_RE.match(text)
        if m is None:
            raise VimError(ErrorCode.E492)

        line_range = LineRange.parse(m.group("range"))
        name = m.group("name")
        bang = m.group("bang") == "!"
        args = m.group("args")

        if not name:
            if line_range is None or bang or args:
                raise VimError(ErrorCode.E492)
            return GotoLineCommand(line_range)

        full = resolve_name(name)
        if full is None:
            raise VimError(ErrorCode.E492)

        if full == "delete":
            count = None
            if args:
                if not args.isdigit() or int(args) == 0:
                    raise VimError(ErrorCode.E488, args)
                count = int(args)
            return DeleteCommand(line_range, count)

        if line_range is not None:
            # write/quit with a range are not supported natively
            raise VimError(ErrorCode.E492)

        if full == "nohlsearch":
            if args:
                raise VimError(ErrorCode.E488, args)
            return NohlsearchCommand()

        if full == "quit":
            if args:
                raise VimError(ErrorCode.E488, args)
            return QuitCommand(force=bang)

        path = Path(args).expanduser() if args else None
        if full == "write":
            return WriteCommand(path=path, force=bang)
        if full == "wq":
            return WriteCommand(path=path, force=bang, quit_after=True)
        return WriteCommand(
            path=path, force=bang, quit_after=True, only_if_modified=True
        )
