#
# SPDX-FileCopyrightText: Copyright (c) 2025 provide.io llc. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
#

"""Disk image skeletons, mounted read-only with hdiutil."""

from __future__ import annotations

from pathlib import Path
import plistlib
import tempfile

from provide.foundation import logger
from provide.foundation.process import run

from dirprojector.archive.readers import Archive, ArchiveDir, Visitor
from dirprojector.config.defaults import DEFAULT_HDIUTIL
from dirprojector.exceptions import SkeletonError


class ArchiveHdi(Archive):
    """A .dmg skeleton. Mounted for the duration of one read pass."""

    def __init__(self, path: Path, nobrowse: bool = False, hdiutil: str = DEFAULT_HDIUTIL) -> None:
        super().__init__(path)
        self.nobrowse = nobrowse
        self.hdiutil = hdiutil

    def _attach(self) -> tuple[Path, str]:
        cmd = [
            self.hdiutil,
            "attach",
            str(self.path),
            "-mountrandom",
            tempfile.gettempdir(),
            "-readonly",
            "-noautoopen",
            "-plist",
        ]
        if self.nobrowse:
            cmd.append("-nobrowse")

        logger.debug("Mounting disk image", path=str(self.path), nobrowse=self.nobrowse)
        result = run(cmd, capture_output=True, check=False)
        if result.returncode != 0:
            raise SkeletonError(f"Failed to mount disk image {self.path}: {result.stderr}")

        stdout = result.stdout.encode("utf-8") if isinstance(result.stdout, str) else result.stdout
        info = plistlib.loads(stdout)
        mount_point = None
        device = None
        for entity in info.get("system-entities", []):
            if "mount-point" in entity:
                mount_point = Path(entity["mount-point"])
            if device is None and "dev-entry" in entity:
                device = entity["dev-entry"]
        if mount_point is None or device is None:
            raise SkeletonError(f"Disk image has no mounted volume: {self.path}")
        logger.debug("Mounted disk image", mount_point=str(mount_point), device=device)
        return mount_point, device

    def _detach(self, device: str) -> None:
        result = run([self.hdiutil, "detach", device, "-force"], capture_output=True, check=False)
        if result.returncode != 0:
            raise SkeletonError(f"Failed to detach disk image {device}: {result.stderr}")
        logger.debug("Detached disk image", device=device)

    def read(self, visitor: Visitor) -> None:
        mount_point, device = self._attach()
        try:
            ArchiveDir(mount_point).read(visitor)
        finally:
            self._detach(device)


# 🌶️📦🔚
