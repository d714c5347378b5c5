# ExLine: Vim-Style Command-Line Layer for Modal Editing
# Copyright (c) 2025
# TriFactoria (Andrew Blankfield)
#
# Licensed under the Business Source License 1.1 (BSL 1.1).
# You may use, modify, and redistribute this file under the terms of the BSL.
# On the Change Date (2029-01-01), this file will be licensed under
# the Apache License, Version 2.0.

"""
Interactive command prompt.

The prompt drives a QuickPickWidget whose list mixes one live "typed" entry
with entries recalled from the persisted history:

    [TypedItem("s/a/b"), RecalledItem("w"), RecalledItem("12"), ...]

Every invocation resolves exactly once, either with the selected text or
with None when the widget is hidden without a selection. All widget event
subscriptions made for an invocation are released when it settles.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any, Union

from .errors import write_error_log
from .history import PersistedHistoryStore
from .interfaces import QuickPickWidget, WidgetEvent


@dataclass(frozen=True)
class TypedItem:
    """The text currently being typed."""

    text: str
    description: str = "(input)"


@dataclass(frozen=True)
class RecalledItem:
    """An entry recalled from history."""

    text: str
    description: str = ""


PromptItem = Union[TypedItem, RecalledItem]


class Subscription:
    """A handler registered on a widget event; dispose() releases it once."""

    def __init__(
        self, event: WidgetEvent, handler: Callable[[Any], None]
    ) -> None:
        self._event = event
        self._handler = handler
        self.disposed = False
        event.add_handler(handler)

    def dispose(self) -> None:
        if self.disposed:
            return
        self.disposed = True
        self._event.remove_handler(self._handler)


# ----------------------------------------------------------------
# List transitions
# ----------------------------------------------------------------


def recalled_items(entries: Sequence[str]) -> list[RecalledItem]:
    return [
        RecalledItem(text, f"(history item {index})")
        for index, text in enumerate(entries)
    ]


def initial_items(seed: str, entries: Sequence[str]) -> list[PromptItem]:
    items: list[PromptItem] = [TypedItem(seed)] if seed else []
    items.extend(recalled_items(entries))
    return items


def apply_value_change(
    items: Sequence[PromptItem], value: str
) -> list[PromptItem]:
    """Return the list after the typed value changed.

    Only the leading TypedItem is touched; recalled items keep their order.
    """
    has_typed = bool(items) and isinstance(items[0], TypedItem)
    rest = list(items[1:]) if has_typed else list(items)
    if not value:
        return rest
    return [TypedItem(value), *rest]


# ----------------------------------------------------------------
# Prompt
# ----------------------------------------------------------------


class InteractivePrompt:
    """PromptStrategy that lets the user type or recall a command."""

    def __init__(
        self,
        widget_factory: Callable[[], QuickPickWidget],
        persisted: PersistedHistoryStore | None = None,
        placeholder: str = "Vim command line",
    ) -> None:
        self._widget_factory = widget_factory
        self.persisted = persisted
        self.placeholder = placeholder

    def _recalled_entries(self) -> list[str]:
        if self.persisted is None:
            return []
        try:
            return self.persisted.entries()
        except Exception as e:
            write_error_log(e)
            return []

    def _record(self, item: PromptItem) -> None:
        """Remember a selected typed entry in the persisted history."""
        if not isinstance(item, TypedItem):
            # recalled entries are reused as-is, never reordered
            return
        if item.text.startswith(" ") or self.persisted is None:
            return
        try:
            self.persisted.prepend(item.text)
        except Exception as e:
            write_error_log(e, command=item.text)

    async def __call__(self, initial_text: str) -> str | None:
        loop = asyncio.get_running_loop()
        result: asyncio.Future[str | None] = loop.create_future()
        subscriptions: list[Subscription] = []
        settled = False

        def settle(value: str | None) -> None:
            nonlocal settled
            if settled:
                return
            settled = True
            if not result.done():
                result.set_result(value)

        widget = self._widget_factory()
        widget.placeholder = self.placeholder
        widget.value = initial_text or ""
        widget.items = initial_items(initial_text, [])

        def on_value(w: QuickPickWidget) -> None:
            w.items = apply_value_change(w.items, w.value)

        def on_selection(w: QuickPickWidget) -> None:
            if not w.selected_items or settled:
                return
            item = w.selected_items[0]
            settle(item.text)
            self._record(item)
            w.hide()

        def on_hide(w: QuickPickWidget) -> None:
            settle(None)
            w.dispose()

        try:
            subscriptions.append(
                Subscription(widget.on_did_change_value, on_value)
            )
            subscriptions.append(
                Subscription(widget.on_did_change_selection, on_selection)
            )
            subscriptions.append(Subscription(widget.on_did_hide, on_hide))

            widget.show()
            widget.items = list(widget.items) + recalled_items(
                self._recalled_entries()
            )
            value = await result
            # let the widget finish tearing down before the caller prints
            await widget.wait_closed()
            return value
        finally:
            for sub in subscriptions:
                sub.dispose()
            if not settled:
                # cancelled while pending: treat as a dismissal
                settled = True
                result.cancel()
                widget.dispose()
