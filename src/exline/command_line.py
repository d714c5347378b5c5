# ExLine: Vim-Style Command-Line Layer for Modal Editing
# Copyright (c) 2025
# TriFactoria (Andrew Blankfield)
#
# Licensed under the Business Source License 1.1 (BSL 1.1).
# You may use, modify, and redistribute this file under the terms of the BSL.
# On the Change Date (2029-01-01), this file will be licensed under
# the Apache License, Version 2.0.

"""
ExLine command line.

Runs one Ex command at a time:
- records it in the session history
- parses it and either executes it natively or hands it to the
  fallback engine (Neovim)
- classifies failures and reports them on the status bar

Important boundary:
- CommandLine does not load YAML or open databases.
- It consumes the injected config, stores, parser, engine and UI.

run() is the error boundary: nothing raised while running a command
reaches the caller. Callers must await one run() before starting the next.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from .browser import HistoryBrowser
from .errors import (
    ErrorKind,
    VimError,
    classify_error,
    format_error,
    write_debug_log,
    write_error_log,
)
from .history import HistoryStore, PersistedHistoryStore
from .interfaces import FallbackEngine, Parser, PromptStrategy, StatusBar
from .session import EditorSession, Mode

HELP_NOT_SUPPORTED = ":help Not supported."


@dataclass
class CommandLine:
    """Session-scoped command line."""

    history: HistoryStore
    parser: Parser
    engine: FallbackEngine
    status_bar: StatusBar
    prompt: PromptStrategy
    browser: HistoryBrowser
    persisted: PersistedHistoryStore | None = None

    enable_neovim: bool = False
    debug: bool = False

    previous_mode: Mode = field(default=Mode.NORMAL)

    # ---------- lifecycle ----------

    async def load(self) -> None:
        """Restore history from backing storage."""
        await self.history.load()

    async def close(self) -> None:
        """Write back history added during this session."""
        await self.history.save()

    # ---------- history access ----------

    @property
    def history_index(self) -> int:
        """Index used for navigating command line history with up/down."""
        return self.history.index

    @history_index.setter
    def history_index(self, index: int) -> None:
        self.history.index = index

    @property
    def history_entries(self) -> list[str]:
        return self.history.get()

    # ---------- status ----------

    def _set_status(
        self, text: str, session: EditorSession, is_error: bool = True
    ) -> None:
        self.status_bar.set(
            text, session.mode, session.is_recording_macro, is_error
        )

    # ---------- run ----------

    async def run(self, command: str | None, session: EditorSession) -> None:
        if not command:
            return

        if command[0] == ":":
            command = command[1:]
            if not command:
                return

        if command == "help":
            self._set_status(HELP_NOT_SUPPORTED, session)
            return

        self.history.add(command)
        self.history.index = len(self.history)

        try:
            cmd = self.parser.parse(command)
            if self.enable_neovim and cmd.delegable:
                await self._run_fallback(command, session)
            else:
                await cmd.execute(session)
        except Exception as e:
            await self._handle_error(e, command, session)

    async def _run_fallback(self, command: str, session: EditorSession) -> None:
        status = await self.engine.run(session, command)
        self._set_status(status, session)

    async def _handle_error(
        self,
        error: Exception,
        command: str,
        session: EditorSession,
        allow_delegate: bool = True,
    ) -> None:
        kind = classify_error(error, self.enable_neovim and allow_delegate)

        if kind is ErrorKind.DELEGATE:
            try:
                await self._run_fallback(command, session)
            except Exception as e:
                await self._handle_error(
                    e, command, session, allow_delegate=False
                )
        elif kind is ErrorKind.SURFACE:
            assert isinstance(error, VimError)
            self._set_status(format_error(error, command), session)
        else:
            write_error_log(error, command=command, mode=session.mode.value)

    # ---------- interactive entry points ----------

    async def prompt_and_run(
        self, initial_text: str, session: EditorSession
    ) -> None:
        if not session.has_document:
            write_debug_log("command line: no active document", self.debug)
            return
        command = await self.prompt(initial_text)
        await self.run(command, session)

    async def show_history(
        self, initial_text: str, session: EditorSession
    ) -> str | None:
        return await self.browser.show(initial_text, session)
