#
# SPDX-FileCopyrightText: Copyright (c) 2025 provide.io llc. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
#

"""Launcher stub loading.

Precompiled launcher stubs are stored raw-deflate compressed, one file per
stub id (``windows-i686``, ``mac-app-ppc``, ``mac-app-i386``), and inflated
on demand.
"""

from __future__ import annotations

from pathlib import Path
import zlib

from provide.foundation import logger

from dirprojector.config import DirProjectorRuntimeConfig
from dirprojector.exceptions import LauncherNotFoundError

BUNDLED_LAUNCHERS_DIR = Path(__file__).parent / "bin"


def launcher_search_dirs() -> list[Path]:
    """Directories searched for launcher stubs, highest priority first."""
    dirs = []
    override = DirProjectorRuntimeConfig.from_env().launchers_dir
    if override:
        dirs.append(Path(override))
    dirs.append(BUNDLED_LAUNCHERS_DIR)
    return dirs


def find_launcher(name: str) -> Path:
    """
    Locate the compressed stub for a launcher id.

    Args:
        name: Launcher id, e.g. "windows-i686"

    Returns:
        Path to the compressed stub

    Raises:
        LauncherNotFoundError: If no search directory has it
    """
    search_dirs = launcher_search_dirs()
    for directory in search_dirs:
        candidate = directory / name
        if candidate.is_file():
            logger.debug("Found launcher", launcher=name, path=str(candidate))
            return candidate
    raise LauncherNotFoundError(name, [str(d) for d in search_dirs])


def load_launcher_binary(name: str) -> bytes:
    """Load and inflate a launcher stub."""
    compressed = find_launcher(name).read_bytes()
    data = zlib.decompress(compressed, wbits=-15)
    logger.debug("Loaded launcher", launcher=name, compressed=len(compressed), size=len(data))
    return data


# 🌶️📦🔚
