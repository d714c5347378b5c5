# ExLine: Vim-Style Command-Line Layer for Modal Editing
# Copyright (c) 2025
# TriFactoria (Andrew Blankfield)
#
# Licensed under the Business Source License 1.1 (BSL 1.1).
# You may use, modify, and redistribute this file under the terms of the BSL.
# On the Change Date (2029-01-01), this file will be licensed under
# the Apache License, Version 2.0.

"""
Neovim-backed fallback engine.

Commands the native parser cannot (or should not) run are executed by a
headless `nvim -es` process against a temporary copy of the buffer:

1. buffer lines are written to a temp file
2. nvim jumps to the session cursor, runs the command, records the new
   cursor line and writes the file back
3. the file is read back into the session

The status text is the last non-empty line nvim printed.
"""

from __future__ import annotations

import asyncio
import os
import tempfile
from pathlib import Path

from .errors import EngineError
from .session import EditorSession


def _vim_string(value: str) -> str:
    """Single-quoted Vim string literal."""
    return "'" + value.replace("'", "''") + "'"


class NeovimEngine:
    """FallbackEngine implementation using a headless nvim subprocess."""

    def __init__(self, path: str = "nvim", timeout: float = 10):
        """Initialize engine with configuration.

        Args:
            path: nvim executable name or path
            timeout: seconds to wait for nvim before killing it
        """
        self.path = path
        self.timeout = timeout

    def _build_env(self) -> dict:
        env = os.environ.copy()
        # keep user config and shada out of the subprocess
        env.pop("VIMINIT", None)
        env.pop("MYVIMRC", None)
        return env

    def build_argv(
        self, session: EditorSession, text: str, buf: Path, cursor_file: Path
    ) -> list[str]:
        return [
            self.path,
            "--headless",
            "-n",
            "-u", "NONE",
            "-i", "NONE",
            "-es",
            f"+{session.cursor + 1}",
            f"+{text}",
            f"+call writefile([line('.')], {_vim_string(str(cursor_file))})",
            "+wq!",
            str(buf),
        ]

    async def run(self, session: EditorSession, text: str) -> str:
        """Run text in nvim and return the status line it produced.

        Raises:
            EngineError: nvim could not be started or timed out
        """
        with tempfile.TemporaryDirectory(prefix="exline-") as tmp:
            buf = Path(tmp) / "buffer.txt"
            cursor_file = Path(tmp) / "cursor"
            buf.write_text("\n".join(session.lines) + "\n", encoding="utf-8")

            argv = self.build_argv(session, text, buf, cursor_file)
            try:
                proc = await asyncio.create_subprocess_exec(
                    *argv,
                    stdin=asyncio.subprocess.DEVNULL,
                    stdout=asyncio.subprocess.PIPE,
                    stderr=asyncio.subprocess.PIPE,
                    env=self._build_env(),
                )
            except OSError as e:
                raise EngineError(f"Error executing {self.path}: {e}") from e

            try:
                stdout, stderr = await asyncio.wait_for(
                    proc.communicate(), timeout=self.timeout
                )
            except asyncio.TimeoutError as e:
                try:
                    proc.kill()
                except ProcessLookupError:
                    pass
                await proc.wait()
                raise EngineError(
                    f"{self.path} timed out after {self.timeout} seconds"
                ) from e

            if buf.exists():
                session.replace_lines(
                    buf.read_text(encoding="utf-8").splitlines()
                )
            if cursor_file.exists():
                raw = cursor_file.read_text(encoding="utf-8").strip()
                if raw.isdigit():
                    session.goto(int(raw) - 1)

        output = (
            stdout.decode("utf-8", errors="replace")
            + stderr.decode("utf-8", errors="replace")
        )
        return last_status_line(output)


def last_status_line(output: str) -> str:
    for line in reversed(output.splitlines()):
        if line.strip():
            return line.strip()
    return ""
