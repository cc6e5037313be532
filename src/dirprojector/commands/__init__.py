#
# SPDX-FileCopyrightText: Copyright (c) 2025 provide.io llc. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
#

"""Command modules for the dirprojector CLI."""

from __future__ import annotations

from dirprojector.commands.build import build_command
from dirprojector.commands.inspect import inspect_command
from dirprojector.commands.pe_resources import pe_resources_command

__all__ = [
    "build_command",
    "inspect_command",
    "pe_resources_command",
]

# 🌶️📦🔚
