# ExLine: Vim-Style Command-Line Layer for Modal Editing
# Copyright (c) 2025
# TriFactoria (Andrew Blankfield)
#
# Licensed under the Business Source License 1.1 (BSL 1.1).
# You may use, modify, and redistribute this file under the terms of the BSL.
# On the Change Date (2029-01-01), this file will be licensed under
# the Apache License, Version 2.0.

"""One-shot picker over the session command history."""

from __future__ import annotations

from collections.abc import Awaitable, Callable

from .errors import write_debug_log
from .history import HistoryStore
from .session import EditorSession

PickFn = Callable[[list[str], str], Awaitable["str | None"]]


class HistoryBrowser:
    """Recall a previous command without editing it."""

    def __init__(
        self,
        history: HistoryStore,
        pick: PickFn,
        placeholder: str = "Vim command history",
        debug: bool = False,
    ) -> None:
        self._history = history
        self._pick = pick
        self.placeholder = placeholder
        self.debug = debug

    async def show(
        self, initial_text: str, session: EditorSession
    ) -> str | None:
        if not session.has_document:
            write_debug_log("history: no active document", self.debug)
            return None

        if initial_text:
            self._history.add(initial_text)

        entries = list(reversed(self._history.get()))
        return await self._pick(entries, self.placeholder)
