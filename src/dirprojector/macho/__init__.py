#
# SPDX-FileCopyrightText: Copyright (c) 2025 provide.io llc. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
#

"""Mach-O type reading and FAT launcher synthesis."""

from __future__ import annotations

from dirprojector.macho.launcher import (
    FAT_ALIGN,
    macho_app_launcher,
    macho_app_launcher_fat,
    macho_app_launcher_thin,
)
from dirprojector.macho.types import (
    CPU_TYPE_I386,
    CPU_TYPE_POWERPC,
    FAT_MAGIC,
    MachoType,
    macho_types_data,
    macho_types_file,
)

__all__ = [
    "CPU_TYPE_I386",
    "CPU_TYPE_POWERPC",
    "FAT_ALIGN",
    "FAT_MAGIC",
    "MachoType",
    "macho_app_launcher",
    "macho_app_launcher_fat",
    "macho_app_launcher_thin",
    "macho_types_data",
    "macho_types_file",
]

# 🌶️📦🔚
