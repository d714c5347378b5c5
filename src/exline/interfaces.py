# ExLine: Vim-Style Command-Line Layer for Modal Editing
# Copyright (c) 2025
# TriFactoria (Andrew Blankfield)
#
# Licensed under the Business Source License 1.1 (BSL 1.1).
# You may use, modify, and redistribute this file under the terms of the BSL.
# On the Change Date (2029-01-01), this file will be licensed under
# the Apache License, Version 2.0.

"""
Protocol definitions for dependency injection.

These interfaces keep the command line independent of the parser,
the fallback engine, the status display and the widget toolkit.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from .session import EditorSession, Mode  # pragma: no cover


class KeyValueStore(Protocol):
    """Host-provided persisted key-value storage."""

    def get_setting(self, key: str, default: str) -> str:
        """Get a value, or default when the key is missing."""
        ...

    def set_setting(self, key: str, value: str) -> None:
        """Set a value."""
        ...


class HistoryBackend(Protocol):
    """Backing storage for the session command history."""

    def list_commands(self) -> list[str]:
        """Return all stored commands, oldest first."""
        ...

    def append_commands(self, commands: list[str]) -> None:
        """Append commands in order."""
        ...


class Command(Protocol):
    """A parsed Ex command."""

    @property
    def delegable(self) -> bool:
        """True when the fallback engine may run this command."""
        ...

    async def execute(self, session: EditorSession) -> None:
        """Run the command natively against the session."""
        ...


class Parser(Protocol):
    """Turns command text into a Command or raises VimError."""

    def parse(self, text: str) -> Command:
        ...


class FallbackEngine(Protocol):
    """External Vim-compatible execution backend."""

    async def run(self, session: EditorSession, text: str) -> str:
        """Run text and return the status line it produced."""
        ...


class StatusBar(Protocol):
    """Single-line status display."""

    def set(
        self,
        text: str,
        mode: Mode,
        is_recording: bool,
        is_error: bool = False,
    ) -> None:
        ...


class WidgetEvent(Protocol):
    """Subscribable widget event (prompt_toolkit.utils.Event compatible).

    Handlers are called with the widget as their only argument.
    """

    def add_handler(self, handler: Callable[[Any], None]) -> None:
        ...

    def remove_handler(self, handler: Callable[[Any], None]) -> None:
        ...


class QuickPickWidget(Protocol):
    """List-selection widget with a free-text value."""

    placeholder: str
    items: Sequence[Any]
    value: str
    selected_items: Sequence[Any]

    on_did_change_value: WidgetEvent
    on_did_change_selection: WidgetEvent
    on_did_hide: WidgetEvent

    def show(self) -> None:
        ...

    def hide(self) -> None:
        ...

    def dispose(self) -> None:
        ...

    async def wait_closed(self) -> None:
        """Return once the widget has finished closing."""
        ...


class PromptStrategy(Protocol):
    """Obtains command text from the user (picker or input box)."""

    async def __call__(self, initial_text: str) -> str | None:
        ...
