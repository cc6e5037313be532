#
# SPDX-FileCopyrightText: Copyright (c) 2025 provide.io llc. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
#

"""Thin streaming readers for skeleton containers."""

from __future__ import annotations

from dirprojector.archive.entry import DirectoryModes, Entry, PathType, write_file
from dirprojector.archive.factory import open_archive
from dirprojector.archive.hdi import ArchiveHdi
from dirprojector.archive.readers import (
    Archive,
    ArchiveDir,
    ArchiveTar,
    ArchiveTarGz,
    ArchiveZip,
    Visitor,
)

__all__ = [
    "Archive",
    "ArchiveDir",
    "ArchiveHdi",
    "ArchiveTar",
    "ArchiveTarGz",
    "ArchiveZip",
    "DirectoryModes",
    "Entry",
    "PathType",
    "Visitor",
    "open_archive",
    "write_file",
]

# 🌶️📦🔚
