#
# SPDX-FileCopyrightText: Copyright (c) 2025 provide.io llc. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
#

"""Streaming readers for directory, zip and tar skeletons.

Each reader visits entries once, in archive order, parents before children
where the container records them that way.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
import os
from pathlib import Path, PurePosixPath
import stat
import struct
import tarfile
import time
from types import TracebackType
import zipfile

from provide.foundation import logger

from dirprojector.archive.entry import Entry, PathType
from dirprojector.exceptions import SkeletonError

Visitor = Callable[[Entry], None]

MACOSX_DIR = "__MACOSX"
APPLEDOUBLE_PREFIX = "._"

APPLEDOUBLE_MAGIC = 0x00051607
APPLEDOUBLE_HEADER_SIZE = 26
APPLEDOUBLE_ENTRY_SIZE = 12
APPLEDOUBLE_RESOURCE_FORK_ID = 2


class Archive(ABC):
    """A skeleton container that can be read in one streaming pass."""

    def __init__(self, path: Path) -> None:
        self.path = path

    @abstractmethod
    def read(self, visitor: Visitor) -> None:
        """Call visitor with every entry, one at a time."""

    def close(self) -> None:
        """Release any resources held by the reader."""

    def __enter__(self) -> Archive:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()


class ArchiveDir(Archive):
    """A skeleton already unpacked into a directory."""

    def read(self, visitor: Visitor) -> None:
        logger.debug("Reading directory skeleton", path=str(self.path))
        for root, dirs, files in os.walk(self.path):
            dirs.sort()
            root_path = Path(root)
            names = sorted(dirs) + sorted(files)
            for name in names:
                full = root_path / name
                rel = full.relative_to(self.path).as_posix()
                st = full.lstat()
                if stat.S_ISLNK(st.st_mode):
                    visitor(
                        Entry(
                            volume_path=rel,
                            type=PathType.SYMLINK,
                            mode=st.st_mode,
                            mtime=st.st_mtime,
                            link_target=os.readlink(full),
                        )
                    )
                elif stat.S_ISDIR(st.st_mode):
                    visitor(Entry(volume_path=rel, type=PathType.DIRECTORY, mode=st.st_mode, mtime=st.st_mtime))
                elif stat.S_ISREG(st.st_mode):
                    visitor(
                        Entry(
                            volume_path=rel,
                            type=PathType.FILE,
                            size=st.st_size,
                            mode=st.st_mode,
                            mtime=st.st_mtime,
                            opener=full.read_bytes,
                        )
                    )


def _appledouble_target(name: str) -> str | None:
    """Map ``__MACOSX/dir/._file`` to ``dir/file``; None for other names."""
    parts = PurePosixPath(name).parts
    if len(parts) < 2 or parts[0] != MACOSX_DIR or not parts[-1].startswith(APPLEDOUBLE_PREFIX):
        return None
    return "/".join([*parts[1:-1], parts[-1][len(APPLEDOUBLE_PREFIX) :]])


def appledouble_resource_fork(data: bytes, name: str = "<appledouble>") -> bytes:
    """
    Return the resource fork stored in an AppleDouble container.

    The container also carries FinderInfo and extended attributes; only
    entry id 2 is the fork. A container without one yields empty bytes.

    Raises:
        SkeletonError: If the header magic is wrong or an entry points
            outside the container.
    """
    if len(data) < APPLEDOUBLE_HEADER_SIZE or struct.unpack_from(">I", data, 0)[0] != APPLEDOUBLE_MAGIC:
        raise SkeletonError(f"Not an AppleDouble file: {name}")

    (count,) = struct.unpack_from(">H", data, 24)
    if len(data) < APPLEDOUBLE_HEADER_SIZE + count * APPLEDOUBLE_ENTRY_SIZE:
        raise SkeletonError(f"Truncated AppleDouble entry table: {name}")

    for index in range(count):
        entry_id, offset, length = struct.unpack_from(
            ">III", data, APPLEDOUBLE_HEADER_SIZE + index * APPLEDOUBLE_ENTRY_SIZE
        )
        if entry_id != APPLEDOUBLE_RESOURCE_FORK_ID:
            continue
        if offset + length > len(data):
            raise SkeletonError(f"AppleDouble resource fork out of range: {name}")
        return data[offset : offset + length]
    return b""


class ArchiveZip(Archive):
    """A zip skeleton. AppleDouble entries under __MACOSX become resource forks."""

    def read(self, visitor: Visitor) -> None:
        logger.debug("Reading zip skeleton", path=str(self.path))
        with zipfile.ZipFile(self.path) as zf:
            for info in zf.infolist():
                name = info.filename.rstrip("/")
                if not name or name == MACOSX_DIR:
                    continue
                mode = info.external_attr >> 16 or None
                mtime = _zip_mtime(info)
                opener = _zip_opener(zf, info)

                fork_target = _appledouble_target(name)
                if fork_target is not None:
                    fork = appledouble_resource_fork(zf.read(info), name)
                    visitor(
                        Entry(
                            volume_path=fork_target,
                            type=PathType.RESOURCE_FORK,
                            size=len(fork),
                            opener=lambda fork=fork: fork,
                        )
                    )
                    continue
                if name.startswith(f"{MACOSX_DIR}/"):
                    continue

                if info.is_dir():
                    visitor(Entry(volume_path=name, type=PathType.DIRECTORY, mode=mode, mtime=mtime))
                elif mode is not None and stat.S_ISLNK(mode):
                    target = zf.read(info).decode("utf-8")
                    visitor(Entry(volume_path=name, type=PathType.SYMLINK, mode=mode, mtime=mtime, link_target=target))
                else:
                    visitor(
                        Entry(
                            volume_path=name,
                            type=PathType.FILE,
                            size=info.file_size,
                            mode=mode,
                            mtime=mtime,
                            opener=opener,
                        )
                    )


def _zip_opener(zf: zipfile.ZipFile, info: zipfile.ZipInfo) -> Callable[[], bytes]:
    return lambda: zf.read(info)


def _zip_mtime(info: zipfile.ZipInfo) -> float | None:
    try:
        return time.mktime((*info.date_time, 0, 0, -1))
    except (OverflowError, ValueError):
        return None


class ArchiveTar(Archive):
    """A tar skeleton, read member by member."""

    tar_mode = "r:"

    def read(self, visitor: Visitor) -> None:
        logger.debug("Reading tar skeleton", path=str(self.path), mode=self.tar_mode)
        with tarfile.open(self.path, self.tar_mode) as tar:
            for member in tar:
                name = member.name.rstrip("/")
                if name.startswith("./"):
                    name = name[2:]
                if not name or name == ".":
                    continue
                if member.isdir():
                    visitor(Entry(volume_path=name, type=PathType.DIRECTORY, mode=member.mode, mtime=member.mtime))
                elif member.issym():
                    visitor(
                        Entry(
                            volume_path=name,
                            type=PathType.SYMLINK,
                            mode=member.mode,
                            mtime=member.mtime,
                            link_target=member.linkname,
                        )
                    )
                elif member.isfile():
                    visitor(
                        Entry(
                            volume_path=name,
                            type=PathType.FILE,
                            size=member.size,
                            mode=member.mode,
                            mtime=member.mtime,
                            opener=_tar_opener(tar, member),
                        )
                    )
                else:
                    logger.debug("Skipping unsupported tar member", name=name, type=member.type)


def _tar_opener(tar: tarfile.TarFile, member: tarfile.TarInfo) -> Callable[[], bytes]:
    def read() -> bytes:
        handle = tar.extractfile(member)
        if handle is None:
            return b""
        with handle:
            return handle.read()

    return read


class ArchiveTarGz(ArchiveTar):
    """A gzip-compressed tar skeleton."""

    tar_mode = "r:gz"


# 🌶️📦🔚
