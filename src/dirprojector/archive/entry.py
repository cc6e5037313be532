#
# SPDX-FileCopyrightText: Copyright (c) 2025 provide.io llc. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
#

"""Archive entry model shared by all skeleton readers."""

from __future__ import annotations

from collections.abc import Callable
from enum import Enum
import os
from pathlib import Path
import sys

from attrs import define, field
from provide.foundation import logger
from provide.foundation.file.directory import ensure_dir, ensure_parent_dir

from dirprojector.config.defaults import DEFAULT_FILE_PERMS


class PathType(Enum):
    """Kind of an archive entry."""

    FILE = "file"
    DIRECTORY = "directory"
    SYMLINK = "symlink"
    RESOURCE_FORK = "resource-fork"


@define
class Entry:
    """
    One entry of a skeleton archive.

    Attributes:
        volume_path: Forward-slash path relative to the archive root
        type: Entry kind
        size: Payload size in bytes, if known
        mode: POSIX mode bits, if known
        mtime: Modification time, if known
    """

    volume_path: str
    type: PathType
    size: int | None = None
    mode: int | None = None
    mtime: float | None = None
    opener: Callable[[], bytes] | None = field(default=None, repr=False)
    link_target: str | None = None

    def read(self) -> bytes:
        """Read the full payload of a file, resource fork or symlink target."""
        if self.type is PathType.SYMLINK and self.link_target is not None:
            return self.link_target.encode("utf-8")
        if self.opener is None:
            return b""
        return self.opener()

    def extract(self, dest: Path, directory_modes: DirectoryModes | None = None) -> None:
        """
        Write this entry to dest.

        Directories are created (existing ones are kept), files are written
        with their original mode, symlinks are recreated. Resource forks are
        written to the named fork of dest on macOS and skipped elsewhere.

        Args:
            dest: Destination path on disk
            directory_modes: Collects directory modes to apply once the
                children are written. Without it the mode is set at once.
        """
        if self.type is PathType.DIRECTORY:
            ensure_dir(dest)
            if self.mode is None:
                return
            if directory_modes is not None:
                directory_modes.add(dest, self.mode)
            else:
                os.chmod(dest, self.mode & 0o7777)
            return

        if self.type is PathType.SYMLINK:
            ensure_parent_dir(dest)
            target = self.link_target if self.link_target is not None else self.read().decode("utf-8")
            os.symlink(target, dest)
            return

        if self.type is PathType.RESOURCE_FORK:
            if sys.platform != "darwin":
                logger.warning("Skipping resource fork on non-macOS platform", path=self.volume_path)
                return
            ensure_parent_dir(dest)
            (dest / "..namedfork" / "rsrc").write_bytes(self.read())
            return

        write_file(dest, self.read(), self.mode, self.mtime)


@define
class DirectoryModes:
    """
    Directory modes held back until every entry has been extracted.

    A read-only directory would reject its own children, so modes are
    applied after the pass, deepest directory first.
    """

    pending: dict[Path, int] = field(factory=dict)

    def add(self, path: Path, mode: int) -> None:
        self.pending[path.resolve()] = mode & 0o7777

    def apply(self) -> None:
        for path in sorted(self.pending, key=lambda p: len(p.parts), reverse=True):
            os.chmod(path, self.pending[path])
        if self.pending:
            logger.debug("Applied deferred directory modes", count=len(self.pending))
        self.pending.clear()


def write_file(dest: Path, data: bytes, mode: int | None = None, mtime: float | None = None) -> None:
    """Write data to a new file, applying mode and modification time when given."""
    ensure_parent_dir(dest)
    dest.write_bytes(data)
    os.chmod(dest, (mode & 0o7777) if mode is not None else DEFAULT_FILE_PERMS)
    if mtime is not None:
        os.utime(dest, (mtime, mtime))


# 🌶️📦🔚
