#
# SPDX-FileCopyrightText: Copyright (c) 2025 provide.io llc. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
#

"""Precompiled launcher stubs."""

from __future__ import annotations

from dirprojector.launchers.loader import find_launcher, launcher_search_dirs, load_launcher_binary
from dirprojector.launchers.windows import launcher_type_for_executable, windows_launcher

__all__ = [
    "find_launcher",
    "launcher_search_dirs",
    "launcher_type_for_executable",
    "load_launcher_binary",
    "windows_launcher",
]

# 🌶️📦🔚
