# ExLine: Vim-Style Command-Line Layer for Modal Editing
# Copyright (c) 2025
# TriFactoria (Andrew Blankfield)
#
# Licensed under the Business Source License 1.1 (BSL 1.1).
# You may use, modify, and redistribute this file under the terms of the BSL.
# On the Change Date (2029-01-01), this file will be licensed under
# the Apache License, Version 2.0.

"""
ExLine CLI entry point and REPL loop.

Design:
- CLI owns process startup, config overrides and DB resolution.
- CommandLine is constructed here once, loaded, passed to the REPL and
  closed on exit (no module-level instance).
- The prompt widget (picker or input box) is chosen once from config.

REPL input (normal-mode keys, one line at a time):
    :            open the command prompt
    :<text>      open the command prompt seeded with <text>
    q:           pick a command from history and run it
    <empty>      show the current line
"""

from __future__ import annotations

import argparse
import asyncio
from collections.abc import Awaitable, Callable
from pathlib import Path

from prompt_toolkit import PromptSession
from prompt_toolkit.styles import Style

from . import config, db
from .browser import HistoryBrowser
from .command_line import CommandLine
from .config import PROMPT_INPUT_BOX, YAMLConfig
from .engine import NeovimEngine
from .history import HistoryStore, PersistedHistoryStore
from .parser import CommandParser
from .session import EditorSession, Mode
from .store import SQLiteStore
from .ui import (
    TerminalStatusBar,
    build_prompt_strategy,
    build_style,
    pick_from_list,
)

ReadLine = Callable[[str], Awaitable[str]]


def build_command_line(
    cfg: YAMLConfig, store: SQLiteStore, style: Style | None = None
) -> CommandLine:
    """Explicit wiring: stores, parser, engine and UI injected."""
    history = HistoryStore(store)
    persisted = PersistedHistoryStore(
        store,
        str(cfg.get_path("command_line.history_key", "COMMAND_LINE_HISTORY")),
    )
    debug = bool(cfg.get_path("system.debug", False))

    async def pick(entries: list[str], placeholder: str) -> str | None:
        return await pick_from_list(entries, placeholder, style=style)

    return CommandLine(
        history=history,
        parser=CommandParser(),
        engine=NeovimEngine(
            path=str(cfg.get_path("neovim.path", "nvim")),
            timeout=float(cfg.get_path("neovim.timeout", 10)),
        ),
        status_bar=TerminalStatusBar(style),
        prompt=build_prompt_strategy(cfg, history, persisted, style=style),
        browser=HistoryBrowser(
            history,
            pick,
            placeholder=str(
                cfg.get_path(
                    "command_line.history_placeholder", "Vim command history"
                )
            ),
            debug=debug,
        ),
        persisted=persisted,
        enable_neovim=cfg.enable_neovim,
        debug=debug,
    )


def _prompt_text(session: EditorSession) -> str:
    name = session.path.name if session.path else "[No Name]"
    dirty = " [+]" if session.modified else ""
    return f"{name}{dirty} {session.cursor + 1}/{len(session.lines)}> "


async def _enter_command_line(
    command_line: CommandLine,
    session: EditorSession,
    action: Callable[[], Awaitable[None]],
) -> None:
    command_line.previous_mode = session.mode
    session.mode = Mode.COMMAND_LINE
    try:
        await action()
    finally:
        if session.mode is Mode.COMMAND_LINE:
            session.mode = command_line.previous_mode


async def run_repl(
    command_line: CommandLine,
    session: EditorSession,
    read_line: ReadLine,
    output_fn: Callable[[str], None] = print,
) -> None:
    """Run the normal-mode REPL until the session stops."""
    while session.running:
        try:
            line = await read_line(_prompt_text(session))
        except (KeyboardInterrupt, EOFError):
            output_fn("")
            break

        if line.startswith(":"):
            seed = line[1:]
            await _enter_command_line(
                command_line,
                session,
                lambda: command_line.prompt_and_run(seed, session),
            )
        elif line.strip() == "q:":

            async def _from_history() -> None:
                chosen = await command_line.show_history("", session)
                await command_line.run(chosen, session)

            await _enter_command_line(command_line, session, _from_history)
        elif not line.strip():
            output_fn(session.lines[session.cursor])
        else:
            output_fn("Type  :  to enter a command, q: for history")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="exline", description="Vim-style Ex command line"
    )
    parser.add_argument("file", nargs="?", help="file to edit")
    parser.add_argument(
        "--neovim",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="delegate commands to a headless nvim (overrides config)",
    )
    parser.add_argument(
        "--input-box",
        action="store_true",
        help="use a plain input line instead of the picker",
    )
    return parser.parse_args(argv)


async def _run_session(
    command_line: CommandLine, session: EditorSession, read_line: ReadLine
) -> None:
    await command_line.load()
    try:
        await run_repl(command_line, session, read_line)
    finally:
        await command_line.close()


def main(argv: list[str] | None = None) -> None:
    """Main entry point for ExLine CLI."""
    args = parse_args(argv)

    cfg = config.load_system_config()
    if args.neovim is not None:
        cfg.set_path("neovim.enable", args.neovim)
    if args.input_box:
        cfg.set_path("command_line.prompt", PROMPT_INPUT_BOX)

    db_path = config.session_db_path(config.get_data_root())
    db.ensure_schema(db_path)
    store = SQLiteStore(db_path)

    style = build_style(cfg)
    command_line = build_command_line(cfg, store, style=style)
    session = EditorSession.open(Path(args.file) if args.file else None)

    repl_session: PromptSession[str] = PromptSession(style=style)
    asyncio.run(_run_session(command_line, session, repl_session.prompt_async))
