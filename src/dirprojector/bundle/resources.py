#
# SPDX-FileCopyrightText: Copyright (c) 2025 provide.io llc. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
#

"""Resource attribute handling for bundles.

Timestamps and the user execute bit can be set explicitly or copied from a
source file. Directory timestamps are deferred and applied deepest first,
after everything inside them has been written.
"""

from __future__ import annotations

from datetime import datetime
import os
from pathlib import Path
import stat

from attrs import define, evolve, field
from provide.foundation import logger

from dirprojector.config.defaults import USER_EXECUTE_BIT

Timestamp = datetime | float


def _to_seconds(value: Timestamp) -> float:
    return value.timestamp() if isinstance(value, datetime) else float(value)


@define(frozen=True)
class ResourceOptions:
    """
    Options for resource copy and create operations.

    Attributes:
        atime: Access time to set
        atime_copy: Copy the access time from the source when atime is unset
        mtime: Modification time to set
        mtime_copy: Copy the modification time from the source when mtime is unset
        executable: Set (True) or clear (False) the user execute bit
        executable_copy: Copy the execute bit from the source when executable is unset
        merge: Allow creating a directory that already exists
        no_recurse: Copy a directory without its contents
    """

    atime: Timestamp | None = None
    atime_copy: bool = False
    mtime: Timestamp | None = None
    mtime_copy: bool = False
    executable: bool | None = None
    executable_copy: bool = False
    merge: bool = False
    no_recurse: bool = False

    @property
    def has_times(self) -> bool:
        return self.atime is not None or self.mtime is not None


def is_mode_executable(mode: int) -> bool:
    return bool(mode & USER_EXECUTE_BIT)


def mode_with_executable(mode: int, executable: bool) -> int:
    return mode | USER_EXECUTE_BIT if executable else mode & ~USER_EXECUTE_BIT


def expand_copy_options(options: ResourceOptions, source: Path, follow_symlinks: bool = True) -> ResourceOptions:
    """
    Fill attributes marked for copying from the source's stat.

    Explicit values always win over copied ones.
    """
    if not (options.atime_copy or options.mtime_copy or options.executable_copy):
        return options

    changes: dict[str, object] = {}
    st = source.stat() if follow_symlinks else source.lstat()
    if options.atime is None and options.atime_copy:
        changes["atime"] = st.st_atime
    if options.mtime is None and options.mtime_copy:
        changes["mtime"] = st.st_mtime
    if options.executable is None and options.executable_copy:
        changes["executable"] = is_mode_executable(st.st_mode)
    return evolve(options, **changes) if changes else options


def set_resource_attributes(path: Path, options: ResourceOptions) -> None:
    """
    Apply the execute bit (not for directories) and timestamps to path.

    Symlinks are changed themselves, not their targets, where the platform
    supports it.
    """
    st = path.lstat()
    is_link = stat.S_ISLNK(st.st_mode)

    if options.executable is not None and not stat.S_ISDIR(st.st_mode):
        mode = mode_with_executable(stat.S_IMODE(st.st_mode), options.executable)
        if not is_link:
            os.chmod(path, mode)
        elif os.chmod in os.supports_follow_symlinks:
            os.chmod(path, mode, follow_symlinks=False)
        else:
            logger.debug("Platform cannot chmod symlinks, skipping", path=str(path))

    if options.has_times:
        atime = _to_seconds(options.atime) if options.atime is not None else st.st_atime
        mtime = _to_seconds(options.mtime) if options.mtime is not None else st.st_mtime
        if not is_link:
            os.utime(path, (atime, mtime))
        elif os.utime in os.supports_follow_symlinks:
            os.utime(path, (atime, mtime), follow_symlinks=False)
        else:
            logger.debug("Platform cannot set symlink times, skipping", path=str(path))


@define
class DeferredAttributes:
    """Directory attribute changes applied at bundle close, deepest first."""

    pending: list[tuple[Path, ResourceOptions]] = field(factory=list)

    def add(self, path: Path, options: ResourceOptions) -> None:
        self.pending.append((path.resolve(), options))

    def clear(self) -> None:
        self.pending.clear()

    def apply(self) -> None:
        ordered = sorted(self.pending, key=lambda item: len(item[0].parts), reverse=True)
        for path, options in ordered:
            set_resource_attributes(path, options)
        if ordered:
            logger.debug("Applied deferred directory attributes", count=len(ordered))
        self.pending.clear()


# 🌶️📦🔚
