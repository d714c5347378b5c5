# ExLine: Vim-Style Command-Line Layer for Modal Editing
# Copyright (c) 2025
# TriFactoria (Andrew Blankfield)
#
# Licensed under the Business Source License 1.1 (BSL 1.1).
# You may use, modify, and redistribute this file under the terms of the BSL.
# On the Change Date (2029-01-01), this file will be licensed under
# the Apache License, Version 2.0.

"""
Configuration and data root resolution for ExLine.

Handles:
- Data root resolution (EXLINE_DATA_HOME, ~/.local/share)
- Session DB and log directory helpers
- Packaged YAML defaults loading (exline/defaults/*.yaml)
"""

from __future__ import annotations

import os
from importlib import resources as importlib_resources
from pathlib import Path
from typing import Any

import yaml


# -----------------------
# Prompt kinds
# -----------------------

PROMPT_PICKER = "picker"
PROMPT_INPUT_BOX = "input_box"


# -----------------------
# Config model wrapper
# -----------------------


class YAMLConfig:
    """Simple config wrapper over the loaded YAML mapping."""

    def __init__(self, config_dict: dict[str, Any]):
        self._config = config_dict

    @property
    def enable_neovim(self) -> bool:
        return bool(self.get_path("neovim.enable", False))

    def get_path(self, path: str, default: Any = None) -> Any:
        """
        Nested lookup using dot-separated path.
        Example: get_path("neovim.timeout", 10) -> 10
        """
        if not path:
            return default

        cur: Any = self._config
        for part in path.split("."):
            if not isinstance(cur, dict):
                return default
            if part not in cur:
                return default
            cur = cur[part]
        return cur

    def set_path(self, path: str, value: Any) -> None:
        """Set a nested value, creating intermediate mappings.

        Used by the CLI to apply command-line overrides once at startup.
        """
        parts = path.split(".")
        cur = self._config
        for part in parts[:-1]:
            nxt = cur.get(part)
            if not isinstance(nxt, dict):
                nxt = {}
                cur[part] = nxt
            cur = nxt
        cur[parts[-1]] = value


# -----------------------
# Data root helpers
# -----------------------


def get_data_root() -> Path:
    """Get the data root directory for ExLine.

    Resolution order:
    1. EXLINE_DATA_HOME environment variable (if set)
    2. ~/.local/share (default, XDG_DATA_HOME is ignored)
    """
    data_home = os.getenv("EXLINE_DATA_HOME")
    if data_home:
        root = Path(data_home)
    else:
        root = Path.home() / ".local" / "share"

    root.mkdir(parents=True, exist_ok=True)
    return root


def session_db_path(data_root: Path) -> Path:
    """<data_root>/exline/session.db"""
    return data_root / "exline" / "session.db"


def logs_dir(data_root: Path) -> Path:
    """<data_root>/exline/logs"""
    return data_root / "exline" / "logs"


# -----------------------
# Packaged defaults loading
# -----------------------


def _defaults_dir() -> Path:
    """Return the installed path to packaged defaults directory."""
    return Path(
        importlib_resources.files("exline.defaults")
    )  # type: ignore[arg-type]


def load_defaults_yaml(filename: str) -> dict[str, Any]:
    """
    Load a YAML file from exline/defaults/.
    """
    defaults_dir = _defaults_dir()
    path = defaults_dir / filename
    if not path.exists():
        raise FileNotFoundError(
            f"Missing defaults YAML: {filename} "
            f"(looked in {defaults_dir})"
        )

    with path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ValueError(
            f"Defaults YAML {filename} must load to a mapping/dict."
        )
    return data


def load_system_config() -> YAMLConfig:
    """
    Load system.yaml from packaged defaults and return a YAMLConfig wrapper.
    """
    return YAMLConfig(load_defaults_yaml("system.yaml"))
