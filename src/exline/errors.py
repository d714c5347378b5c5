# ExLine: Vim-Style Command-Line Layer for Modal Editing
# Copyright (c) 2025
# TriFactoria (Andrew Blankfield)
#
# Licensed under the Business Source License 1.1 (BSL 1.1).
# You may use, modify, and redistribute this file under the terms of the BSL.
# On the Change Date (2029-01-01), this file will be licensed under
# the Apache License, Version 2.0.

"""
Error taxonomy for command execution.

VimError is the structured domain error raised by the parser and by native
commands. classify_error() is the one place that decides whether a failure
is delegated to the fallback engine, shown to the user, or only logged.
"""

from __future__ import annotations

import traceback
from datetime import datetime
from enum import Enum

from . import config as cfg_module


class ErrorCode(Enum):
    E16 = "Invalid range"
    E32 = "No file name"
    E37 = "No write since last change (add ! to override)"
    E212 = "Can't open file for writing"
    E488 = "Trailing characters"
    E492 = "Not an editor command"


class VimError(Exception):
    """Structured domain error carrying a Vim error code."""

    def __init__(self, code: ErrorCode, detail: str = "") -> None:
        self.code = code
        self.detail = detail
        super().__init__(str(self))

    def __str__(self) -> str:
        msg = f"{self.code.name}: {self.code.value}"
        if self.detail:
            msg += f": {self.detail}"
        return msg


class EngineError(Exception):
    """The fallback engine could not be launched or did not finish."""


class ErrorKind(Enum):
    DELEGATE = "delegate"  # re-route the text to the fallback engine
    SURFACE = "surface"  # format and show on the status line
    SILENT = "silent"  # log only; never shown to the user


def classify_error(error: BaseException, fallback_enabled: bool) -> ErrorKind:
    """Decide how a failure raised while running a command is handled."""
    if isinstance(error, VimError):
        if error.code is ErrorCode.E492 and fallback_enabled:
            return ErrorKind.DELEGATE
        return ErrorKind.SURFACE
    return ErrorKind.SILENT


def format_error(error: VimError, command: str) -> str:
    return f"{error}. {command}"


# ----------------------------------------------------------------
# Log files
# ----------------------------------------------------------------


def write_error_log(
    error: BaseException,
    command: str = "",
    mode: str = "",
) -> None:
    """Append an entry to the error log.

    Used for failures that are deliberately not shown to the user.
    Only creates the log directory when actually needed.
    """
    try:
        log_dir = cfg_module.logs_dir(cfg_module.get_data_root())
        log_dir.mkdir(parents=True, exist_ok=True)

        lines = [
            datetime.now().isoformat(),
            f"mode={mode}",
        ]
        if command:
            lines.append(f"cmd={command}")
        lines.append(f"error={type(error).__name__}: {error}")
        lines.append("traceback:")
        lines.append(
            "".join(
                traceback.format_exception(
                    type(error), error, error.__traceback__
                )
            ).rstrip()
        )
        lines.append("----")

        with (log_dir / "error.log").open("a", encoding="utf-8") as f:
            f.write("\n".join(lines) + "\n")

    except Exception:
        # Already handling a failure; nothing useful left to do
        pass


def write_debug_log(message: str, enabled: bool) -> None:
    """Append one line to debug.log when debug logging is enabled."""
    if not enabled:
        return
    try:
        log_dir = cfg_module.logs_dir(cfg_module.get_data_root())
        log_dir.mkdir(parents=True, exist_ok=True)
        with (log_dir / "debug.log").open("a", encoding="utf-8") as f:
            f.write(f"{datetime.now().isoformat()} {message}\n")
    except Exception:
        pass
