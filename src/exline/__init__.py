# ExLine: Vim-Style Command-Line Layer for Modal Editing
# Copyright (c) 2025
# TriFactoria (Andrew Blankfield)
#
# Licensed under the Business Source License 1.1 (BSL 1.1).
# You may use, modify, and redistribute this file under the terms of the BSL.
# On the Change Date (2029-01-01), this file will be licensed under
# the Apache License, Version 2.0.

"""
ExLine core package.

Vim-style Ex command line: history, interactive prompt, native/Neovim
dispatch and error reporting.
"""
from .command_line import CommandLine as CommandLine  # noqa: F401 (re-export)
