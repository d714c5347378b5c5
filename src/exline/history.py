# ExLine: Vim-Style Command-Line Layer for Modal Editing
# Copyright (c) 2025
# TriFactoria (Andrew Blankfield)
#
# Licensed under the Business Source License 1.1 (BSL 1.1).
# You may use, modify, and redistribute this file under the terms of the BSL.
# On the Change Date (2029-01-01), this file will be licensed under
# the Apache License, Version 2.0.

"""
Command history stores.

There are two stores and they are intentionally not merged:

- HistoryStore: every command run in this session (plus those restored
  from earlier sessions by load()), oldest first, with a browsing cursor
  for up/down recall. Written only by CommandLine.run().
- PersistedHistoryStore: most-recent-first list shown as recalled items in
  the interactive prompt. Written only when a typed entry is selected in
  that prompt.
"""

from __future__ import annotations

import asyncio
import json

from .interfaces import HistoryBackend, KeyValueStore


class HistoryStore:
    """Session command history with a browsing cursor."""

    def __init__(self, backend: HistoryBackend | None = None) -> None:
        self._backend = backend
        self._entries: list[str] = []
        self._saved = 0
        self.index = 0
        # text being typed when browsing started
        self._draft = ""

    def add(self, text: str) -> None:
        self._entries.append(text)

    def get(self) -> list[str]:
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    async def load(self) -> None:
        """Restore entries from backing storage."""
        if self._backend is None:
            return
        entries = await asyncio.to_thread(self._backend.list_commands)
        self._entries = list(entries)
        self._saved = len(self._entries)
        self.index = len(self._entries)

    async def save(self) -> None:
        """Write entries added since the last load/save."""
        if self._backend is None:
            return
        pending = self._entries[self._saved:]
        if not pending:
            return
        await asyncio.to_thread(self._backend.append_commands, pending)
        self._saved += len(pending)

    # ---------- browsing ----------

    def previous(self, current: str) -> str:
        """Move the cursor to an older entry and return its text."""
        if not self._entries:
            return current
        if self.index >= len(self._entries):
            self._draft = current
            self.index = len(self._entries)
        if self.index > 0:
            self.index -= 1
        return self._entries[self.index]

    def next(self, current: str) -> str:
        """Move the cursor to a newer entry; past the newest restores the
        draft."""
        if self.index >= len(self._entries):
            return current
        self.index += 1
        if self.index == len(self._entries):
            return self._draft
        return self._entries[self.index]


class PersistedHistoryStore:
    """Most-recent-first command list kept in a key-value store."""

    def __init__(self, store: KeyValueStore, key: str) -> None:
        self._store = store
        self.key = key

    def entries(self) -> list[str]:
        raw = self._store.get_setting(self.key, "[]")
        try:
            data = json.loads(raw)
        except (TypeError, ValueError):
            return []
        if not isinstance(data, list):
            return []
        return [e for e in data if isinstance(e, str)]

    def prepend(self, text: str) -> None:
        current = self.entries()
        current.insert(0, text)
        self._store.set_setting(self.key, json.dumps(current))
