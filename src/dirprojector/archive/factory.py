#
# SPDX-FileCopyrightText: Copyright (c) 2025 provide.io llc. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
#

"""Pick a skeleton reader for a path."""

from __future__ import annotations

from pathlib import Path

from provide.foundation import logger

from dirprojector.archive.hdi import ArchiveHdi
from dirprojector.archive.readers import Archive, ArchiveDir, ArchiveTar, ArchiveTarGz, ArchiveZip
from dirprojector.config.defaults import DEFAULT_HDIUTIL
from dirprojector.exceptions import SkeletonNotFileOrDirectoryError, UnsupportedSkeletonFormatError


def open_archive(path: Path, nobrowse: bool = False, hdiutil: str = DEFAULT_HDIUTIL) -> Archive:
    """
    Open a skeleton by sniffing directory-ness, then file extension.

    Args:
        path: Skeleton directory or archive file
        nobrowse: Hide a mounted disk image from the Finder
        hdiutil: hdiutil binary for disk images

    Returns:
        A reader for the skeleton

    Raises:
        SkeletonNotFileOrDirectoryError: If path is neither
        UnsupportedSkeletonFormatError: If the extension is unknown
    """
    if path.is_dir():
        archive: Archive = ArchiveDir(path)
    elif path.is_file():
        name = path.name.lower()
        if name.endswith(".zip"):
            archive = ArchiveZip(path)
        elif name.endswith((".tar.gz", ".tgz")):
            archive = ArchiveTarGz(path)
        elif name.endswith(".tar"):
            archive = ArchiveTar(path)
        elif name.endswith(".dmg"):
            archive = ArchiveHdi(path, nobrowse=nobrowse, hdiutil=hdiutil)
        else:
            raise UnsupportedSkeletonFormatError(str(path))
    else:
        raise SkeletonNotFileOrDirectoryError(str(path))

    logger.debug("Opened skeleton", path=str(path), reader=type(archive).__name__)
    return archive


# 🌶️📦🔚
