#
# SPDX-FileCopyrightText: Copyright (c) 2025 provide.io llc. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
#

"""Windows projector skeleton rules, resource edits and launcher."""

from __future__ import annotations

import os
from pathlib import Path, PurePosixPath
from typing import TYPE_CHECKING

from provide.foundation import logger
from provide.foundation.file import atomic_write

from dirprojector.archive import Entry, write_file
from dirprojector.config.defaults import (
    DEFAULT_EXECUTABLE_PERMS,
    WINDOWS_SHOCKWAVE_3D_ASSET_NAME,
    WINDOWS_SKL_NAME,
    XTRAS_DIR,
)
from dirprojector.exceptions import PatchTargetNotFoundError
from dirprojector.launchers import launcher_type_for_executable, windows_launcher
from dirprojector.patcher import (
    SHOCKWAVE_3D_DISPLAY_DRIVERS_SIZE_NAME,
    SHOCKWAVE_3D_DISPLAY_DRIVERS_SIZE_TEMPLATES,
    patch_bytes_once,
    patch_file_once,
)
from dirprojector.pe_utils import pe_resource_replace
from dirprojector.projector.config import ProjectorConfig, WindowsProjectorConfig
from dirprojector.projector.layout import xtras_path
from dirprojector.projector.patches import FilePatch, basename_matcher
from dirprojector.projector.skeleton import SKIP, Claim, SkeletonRules, xtras_handler
from dirprojector.projector.xtras import mappings_from_include_xtras
from dirprojector.utils.data import resolve_payload

if TYPE_CHECKING:
    from dirprojector.projector.engine import ProjectorBuild


def windows_skeleton_rules(config: WindowsProjectorConfig) -> SkeletonRules:
    """
    Handlers for a Windows skeleton.

    Order: the Xtras tree, then the root ``Projec32.skl`` (extracted as the
    projector), then root ``*.dll`` files (extracted beside it, or dropped
    for Shockwave projectors).
    """
    projector_path = config.path

    def skl_handler(entry: Entry, found: set[str]) -> Claim | None:
        name = entry.volume_path
        if "/" in name or name.lower() != WINDOWS_SKL_NAME.lower():
            return None
        found.add(WINDOWS_SKL_NAME)
        return Claim(projector_path)

    def dll_handler(entry: Entry, found: set[str]) -> Claim | None:
        name = entry.volume_path
        if "/" in name or not name.lower().endswith(".dll"):
            return None
        if config.shockwave:
            logger.debug("Excluding DLL from Shockwave projector", path=name)
            return SKIP
        return Claim(projector_path.parent / name)

    return SkeletonRules(
        handlers=(
            xtras_handler(XTRAS_DIR, mappings_from_include_xtras(config.include_xtras), xtras_path(config)),
            skl_handler,
            dll_handler,
        ),
        required=(WINDOWS_SKL_NAME, XTRAS_DIR),
    )


def write_windows_skeleton(build: ProjectorBuild) -> None:
    config = build.config
    assert isinstance(config, WindowsProjectorConfig)
    build.stream_skeleton(windows_skeleton_rules(config))


def _resolve_icon(config: WindowsProjectorConfig) -> bytes | None:
    return resolve_payload(config.icon_data, config.icon_file)


def windows_file_patches(config: ProjectorConfig) -> list[FilePatch]:
    """
    Patches applied to Windows skeleton files as they are extracted.

    The Shockwave 3D driver size patch comes first, then the icon and
    version resource edit of the SKL.
    """
    assert isinstance(config, WindowsProjectorConfig)
    patches = []

    if config.patch_3d_display_drivers_size:
        patches.append(
            FilePatch(
                name=WINDOWS_SHOCKWAVE_3D_ASSET_NAME,
                match=basename_matcher(WINDOWS_SHOCKWAVE_3D_ASSET_NAME),
                modify=lambda data: patch_bytes_once(
                    data,
                    SHOCKWAVE_3D_DISPLAY_DRIVERS_SIZE_TEMPLATES,
                    SHOCKWAVE_3D_DISPLAY_DRIVERS_SIZE_NAME,
                ),
            )
        )

    icon_data = _resolve_icon(config)
    version_strings = config.version_strings
    if icon_data or version_strings:
        patches.append(
            FilePatch(
                name=WINDOWS_SKL_NAME,
                match=lambda volume_path: (
                    "/" not in volume_path and PurePosixPath(volume_path).name.lower() == WINDOWS_SKL_NAME.lower()
                ),
                modify=lambda data: pe_resource_replace(data, icon_data=icon_data, version_strings=version_strings),
            )
        )

    return patches


def patch_installed_3d_asset(xtras_dir: Path) -> int:
    """
    Patch every installed ``Shockwave 3D Asset.x32`` below xtras_dir.

    Returns:
        Number of files patched

    Raises:
        PatchTargetNotFoundError: If no such file exists
    """
    target = WINDOWS_SHOCKWAVE_3D_ASSET_NAME.lower()
    patched = 0
    for root, _dirs, files in os.walk(xtras_dir):
        for name in files:
            if name.lower() != target:
                continue
            patch_file_once(
                Path(root) / name,
                SHOCKWAVE_3D_DISPLAY_DRIVERS_SIZE_TEMPLATES,
                SHOCKWAVE_3D_DISPLAY_DRIVERS_SIZE_NAME,
            )
            patched += 1
    if not patched:
        raise PatchTargetNotFoundError(WINDOWS_SHOCKWAVE_3D_ASSET_NAME)
    return patched


def modify_windows_skeleton(build: ProjectorBuild) -> None:
    """
    Edit an extracted Windows projector in place.

    Applies icon and version resources to the projector executable, then
    the Shockwave 3D driver size patch to the installed Xtras.
    """
    config = build.config
    assert isinstance(config, WindowsProjectorConfig)

    icon_data = _resolve_icon(config)
    if icon_data or config.version_strings:
        data = config.path.read_bytes()
        atomic_write(
            config.path,
            pe_resource_replace(data, icon_data=icon_data, version_strings=config.version_strings),
        )
        logger.debug("Updated projector resources", path=str(config.path))

    if config.patch_3d_display_drivers_size:
        count = patch_installed_3d_asset(xtras_path(config))
        logger.debug("Patched Shockwave 3D Asset", count=count)


def write_windows_launcher(config: ProjectorConfig, launcher_path: Path) -> None:
    """
    Write the launcher stub matching a projector's machine type.

    The launcher gets the projector's version info and first icon group.

    Raises:
        UnknownMachineTypeError: For machines without a launcher
    """
    arch = launcher_type_for_executable(config.path)
    data = windows_launcher(arch, resources=config.path)
    write_file(launcher_path, data, DEFAULT_EXECUTABLE_PERMS)
    logger.info("Wrote launcher", path=str(launcher_path), arch=arch, size=len(data))


# 🌶️📦🔚
