# ExLine: Vim-Style Command-Line Layer for Modal Editing
# Copyright (c) 2025
# TriFactoria (Andrew Blankfield)
#
# Licensed under the Business Source License 1.1 (BSL 1.1).
# You may use, modify, and redistribute this file under the terms of the BSL.
# On the Change Date (2029-01-01), this file will be licensed under
# the Apache License, Version 2.0.

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from prompt_toolkit import PromptSession
from prompt_toolkit.application import Application
from prompt_toolkit.buffer import Buffer
from prompt_toolkit.document import Document
from prompt_toolkit.formatted_text import FormattedText
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.layout import HSplit, Layout, Window
from prompt_toolkit.layout.controls import BufferControl, FormattedTextControl
from prompt_toolkit.layout.dimension import Dimension
from prompt_toolkit.layout.processors import BeforeInput
from prompt_toolkit.shortcuts import print_formatted_text
from prompt_toolkit.styles import Style
from prompt_toolkit.utils import Event

from .config import PROMPT_INPUT_BOX, PROMPT_PICKER
from .errors import write_error_log
from .history import HistoryStore, PersistedHistoryStore
from .prompt import InteractivePrompt, RecalledItem, Subscription

if TYPE_CHECKING:
    from .config import YAMLConfig  # pragma: no cover
    from .interfaces import PromptStrategy  # pragma: no cover
    from .session import Mode  # pragma: no cover


# ----------------------------
# Config helpers
# ----------------------------


def _cfg_get_path(config: YAMLConfig | None, path: str, default):
    if config is None or not hasattr(config, "get_path"):
        return default
    try:
        return config.get_path(path, default)
    except Exception:
        return default


def _cfg_dict(config: YAMLConfig | None, path: str, default: dict) -> dict:
    val = _cfg_get_path(config, path, default)
    return val if isinstance(val, dict) else default


def _cfg_str(config: YAMLConfig | None, path: str, default: str) -> str:
    val = _cfg_get_path(config, path, default)
    return str(val) if val is not None else default


# ----------------------------
# Theme / Style
# ----------------------------


def _default_style_dict() -> dict[str, str]:
    return {
        "quickpick.prompt": "#5f87ff bold",
        "quickpick.placeholder": "#808080 italic",
        "quickpick.item": "#d0d0d0",
        "quickpick.item.current": "bg:#303030 #ffffff bold",
        "quickpick.description": "#808080",
        "status": "#d0d0d0",
        "status.error": "#ff5f5f bold",
        "status.mode": "#ffff00 bold",
        "status.recording": "#d75f87",
    }


def build_style(config: YAMLConfig | None) -> Style:
    base = _default_style_dict()
    overrides = _cfg_dict(config, "ui.theme.style", {})
    # only keep string->string
    for k, v in list(overrides.items()):
        if isinstance(k, str) and isinstance(v, str):
            base[k] = v
    return Style.from_dict(base)


# ----------------------------
# QuickPick widget
# ----------------------------


class QuickPick:
    """
    Inline list-selection widget built on a prompt_toolkit Application.

    Items need `text` and `description` attributes. The list is filtered
    by the typed value (case-insensitive substring). Events fire with the
    widget as their only argument:
      - on_did_change_value: the typed value changed
      - on_did_change_selection: Enter picked `selected_items[0]`
      - on_did_hide: the widget closed (after selection or Esc/Ctrl-C)
    """

    def __init__(self, style: Style | None = None, max_visible: int = 10):
        self.placeholder = ""
        self.items: Sequence[Any] = []
        self.selected_items: Sequence[Any] = []

        self.on_did_change_value = Event(self)
        self.on_did_change_selection = Event(self)
        self.on_did_hide = Event(self)

        self._style = style
        self._max_visible = max_visible
        self._index = 0
        self._buffer = Buffer(
            multiline=False, on_text_changed=self._text_changed
        )
        self._app: Application | None = None
        self._task: asyncio.Task | None = None
        self._hidden = False
        self._disposed = False

    # ---------- value ----------

    @property
    def value(self) -> str:
        return self._buffer.text

    @value.setter
    def value(self, text: str) -> None:
        self._buffer.set_document(
            Document(text, len(text)), bypass_readonly=True
        )

    def _text_changed(self, _buffer: Buffer) -> None:
        self._index = 0
        self.on_did_change_value.fire()
        if self._app is not None:
            self._app.invalidate()

    # ---------- list ----------

    def visible_items(self) -> list[Any]:
        needle = self.value.lower()
        return [it for it in self.items if needle in it.text.lower()]

    def move(self, delta: int) -> None:
        visible = self.visible_items()
        if not visible:
            self._index = 0
            return
        self._index = (self._index + delta) % len(visible)

    def accept(self) -> None:
        visible = self.visible_items()
        if not visible:
            return
        self.selected_items = [visible[min(self._index, len(visible) - 1)]]
        self.on_did_change_selection.fire()

    def _render_items(self):
        visible = self.visible_items()[: self._max_visible]
        out: list[tuple[str, str]] = []
        for i, item in enumerate(visible):
            current = i == self._index
            style = (
                "class:quickpick.item.current"
                if current
                else "class:quickpick.item"
            )
            out.append((style, ("> " if current else "  ") + item.text))
            if item.description:
                out.append(
                    ("class:quickpick.description", f"  {item.description}")
                )
            if i != len(visible) - 1:
                out.append(("", "\n"))
        return out

    def _render_placeholder(self):
        return [("class:quickpick.placeholder", self.placeholder)]

    # ---------- application ----------

    def _build_key_bindings(self) -> KeyBindings:
        kb = KeyBindings()

        @kb.add("up")
        @kb.add("c-p")
        def _(event):
            self.move(-1)

        @kb.add("down")
        @kb.add("c-n")
        def _(event):
            self.move(+1)

        @kb.add("enter")
        def _(event):
            self.accept()

        @kb.add("escape", eager=True)
        @kb.add("c-c")
        def _(event):
            self.hide()

        return kb

    def _build_application(self) -> Application:
        input_window = Window(
            BufferControl(
                self._buffer,
                input_processors=[
                    BeforeInput(":", style="class:quickpick.prompt")
                ],
            ),
            height=1,
        )
        body = HSplit(
            [
                Window(
                    FormattedTextControl(self._render_placeholder),
                    height=1,
                ),
                input_window,
                Window(
                    FormattedTextControl(self._render_items),
                    height=Dimension(max=self._max_visible),
                ),
            ]
        )
        return Application(
            layout=Layout(body, focused_element=input_window),
            key_bindings=self._build_key_bindings(),
            style=self._style,
            full_screen=False,
            erase_when_done=True,
        )

    async def _run(self) -> None:
        try:
            if not self._hidden:
                self._app = self._build_application()
                await self._app.run_async()
        except Exception as e:
            write_error_log(e)
        finally:
            self._app = None
            self.on_did_hide.fire()

    async def wait_closed(self) -> None:
        if self._task is not None:
            await self._task

    def show(self) -> None:
        if self._task is not None or self._disposed:
            return
        self._task = asyncio.ensure_future(self._run())

    def hide(self) -> None:
        self._hidden = True
        app = self._app
        if app is not None and app.is_running:
            if app.future is None or not app.future.done():
                app.exit()

    def dispose(self) -> None:
        self._disposed = True
        self.hide()


async def pick_from_list(
    entries: list[str],
    placeholder: str,
    style: Style | None = None,
) -> str | None:
    """Show entries in a QuickPick and return the chosen one (or None)."""
    loop = asyncio.get_running_loop()
    result: asyncio.Future[str | None] = loop.create_future()

    widget = QuickPick(style=style)
    widget.placeholder = placeholder
    widget.items = [RecalledItem(text) for text in entries]

    def on_selection(w: QuickPick) -> None:
        if w.selected_items and not result.done():
            result.set_result(w.selected_items[0].text)
        w.hide()

    def on_hide(w: QuickPick) -> None:
        if not result.done():
            result.set_result(None)

    subscriptions = [
        Subscription(widget.on_did_change_selection, on_selection),
        Subscription(widget.on_did_hide, on_hide),
    ]
    try:
        widget.show()
        value = await result
        await widget.wait_closed()
        return value
    finally:
        for sub in subscriptions:
            sub.dispose()
        widget.dispose()


# ----------------------------
# Single-line input box
# ----------------------------


class InputBox:
    """
    PromptStrategy using a plain PromptSession line.

    Up/Down walk the session history through its browsing cursor.
    Ctrl-C / Ctrl-D cancel (resolve to None).
    """

    def __init__(
        self,
        history: HistoryStore,
        placeholder: str = "Vim command line",
        style: Style | None = None,
    ) -> None:
        self.history = history
        self.placeholder = placeholder
        self.session: PromptSession[str] | None = None
        self._style = style

    def _ensure_session(self) -> None:
        if self.session is not None:
            return
        self.session = PromptSession(
            key_bindings=self.build_key_bindings(),
            style=self._style,
            placeholder=FormattedText(
                [("class:quickpick.placeholder", self.placeholder)]
            ),
        )

    def build_key_bindings(self) -> KeyBindings:
        kb = KeyBindings()

        def _replace(event, text: str) -> None:
            buf = event.current_buffer
            buf.set_document(Document(text, len(text)), bypass_readonly=True)

        @kb.add("up")
        def _(event):
            _replace(event, self.history.previous(event.current_buffer.text))

        @kb.add("down")
        def _(event):
            _replace(event, self.history.next(event.current_buffer.text))

        return kb

    async def __call__(self, initial_text: str) -> str | None:
        self._ensure_session()
        assert self.session is not None
        self.history.index = len(self.history)
        try:
            return await self.session.prompt_async(
                ":", default=initial_text or ""
            )
        except (KeyboardInterrupt, EOFError):
            return None


# ----------------------------
# Status bar
# ----------------------------


class TerminalStatusBar:
    """StatusBar implementation printing one styled line."""

    def __init__(self, style: Style | None = None) -> None:
        self._style = style
        self.text = ""

    def render(
        self, text: str, mode: Mode, is_recording: bool, is_error: bool
    ) -> FormattedText:
        parts: list[tuple[str, str]] = []
        if mode.tag:
            parts.append(("class:status.mode", mode.tag + " "))
        if is_recording:
            parts.append(("class:status.recording", "recording "))
        parts.append(
            ("class:status.error" if is_error else "class:status", text)
        )
        return FormattedText(parts)

    def set(
        self,
        text: str,
        mode: Mode,
        is_recording: bool,
        is_error: bool = False,
    ) -> None:
        self.text = text
        if not text and not mode.tag and not is_recording:
            return
        print_formatted_text(
            self.render(text, mode, is_recording, is_error),
            style=self._style,
        )


# ----------------------------
# Strategy selection
# ----------------------------


def build_prompt_strategy(
    config: YAMLConfig | None,
    history: HistoryStore,
    persisted: PersistedHistoryStore | None,
    style: Style | None = None,
) -> PromptStrategy:
    """Resolve the configured prompt widget once at startup."""
    kind = _cfg_str(config, "command_line.prompt", PROMPT_PICKER)
    placeholder = _cfg_str(
        config, "command_line.placeholder", "Vim command line"
    )
    if kind == PROMPT_INPUT_BOX:
        return InputBox(history, placeholder=placeholder, style=style)
    if kind != PROMPT_PICKER:
        raise ValueError(
            f"command_line.prompt must be '{PROMPT_PICKER}' or "
            f"'{PROMPT_INPUT_BOX}', got {kind!r}"
        )
    return InteractivePrompt(
        lambda: QuickPick(style=style),
        persisted=persisted,
        placeholder=placeholder,
    )
