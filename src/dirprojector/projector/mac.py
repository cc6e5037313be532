#
# SPDX-FileCopyrightText: Copyright (c) 2025 provide.io llc. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
#

"""Mac app projector skeleton rules, Info.plist rewrite and launcher.

Mac skeletons carry the app under ``Projector Resources`` (or ``Projector
Intel Resources``) with a ``Contents`` tree, and the Xtras at the root.
"""

from __future__ import annotations

from pathlib import Path
import plistlib
from typing import TYPE_CHECKING, Any

from provide.foundation import logger
from provide.foundation.file import safe_copy
from provide.foundation.file.directory import ensure_parent_dir

from dirprojector.archive import Entry, write_file
from dirprojector.config.defaults import (
    DEFAULT_EXECUTABLE_PERMS,
    MAC_BINARY_NAME,
    MAC_EXTENSION,
    MAC_ICON_NAME,
    MAC_INTEL_RESOURCES_DIR,
    MAC_NEWLINE,
    MAC_RESOURCES_DIR,
    MAC_RSRC_NAME,
    XTRAS_DIR,
)
from dirprojector.macho import macho_app_launcher, macho_types_file
from dirprojector.projector.config import MacProjectorConfig, ProjectorConfig
from dirprojector.projector.layout import xtras_path
from dirprojector.projector.skeleton import SKIP, Claim, SkeletonRules, xtras_handler
from dirprojector.projector.xtras import mappings_from_include_xtras
from dirprojector.utils.data import resolve_payload
from dirprojector.utils.paths import path_relative_base, path_relative_base_match, trim_extension

if TYPE_CHECKING:
    from dirprojector.projector.engine import ProjectorBuild

APP_INFO_PLIST = "Contents/Info.plist"
APP_PKG_INFO = "Contents/PkgInfo"
APP_FRAMEWORKS = "Contents/Frameworks"


def resources_dir_name(config: MacProjectorConfig) -> str:
    return MAC_INTEL_RESOURCES_DIR if config.intel else MAC_RESOURCES_DIR


def app_binary_name(config: MacProjectorConfig) -> str:
    return config.binary_name or MAC_BINARY_NAME


def app_icon_name(config: MacProjectorConfig) -> str:
    return f"{config.binary_name}.icns" if config.binary_name else MAC_ICON_NAME


def app_rsrc_name(config: MacProjectorConfig) -> str:
    return f"{config.binary_name}.rsrc" if config.binary_name else MAC_RSRC_NAME


def app_binary_path(name: str) -> str:
    return f"Contents/MacOS/{name}"


def app_resource_path(name: str) -> str:
    return f"Contents/Resources/{name}"


def bundle_name_value(config: MacProjectorConfig) -> bool | str | None:
    """CFBundleName to apply: False to leave it, None to remove it, else the name."""
    if config.bundle_name is True:
        return trim_extension(config.path.name, MAC_EXTENSION, nocase=True)
    return config.bundle_name


def mac_skeleton_rules(config: MacProjectorConfig) -> SkeletonRules:
    """
    Handlers for a Mac skeleton.

    Inside the resources directory: Frameworks is dropped for Shockwave
    projectors; Info.plist, PkgInfo and the icon are dropped when custom
    ones are configured; the binary, icon and rsrc are renamed when a
    binary name is set. Everything else is extracted as is.
    """
    resources_dir = resources_dir_name(config)
    binary_default = app_binary_path(MAC_BINARY_NAME)
    icon_default = app_resource_path(MAC_ICON_NAME)
    rsrc_default = app_resource_path(MAC_RSRC_NAME)

    markers = {
        "frameworks": f"{resources_dir}/{APP_FRAMEWORKS}",
        "binary": f"{resources_dir}/{binary_default}",
        "info_plist": f"{resources_dir}/{APP_INFO_PLIST}",
        "pkg_info": f"{resources_dir}/{APP_PKG_INFO}",
        "icon": f"{resources_dir}/{icon_default}",
        "rsrc": f"{resources_dir}/{rsrc_default}",
    }

    def under(path: str, start: str) -> bool:
        return path_relative_base_match(path, start, nocase=True)

    def resources_handler(entry: Entry, found: set[str]) -> Claim | None:
        relative = path_relative_base(entry.volume_path, resources_dir, nocase=True)
        if relative is None:
            return None
        found.add(resources_dir)

        if under(relative, APP_FRAMEWORKS):
            found.add(markers["frameworks"])
            if config.shockwave:
                return SKIP

        if under(relative, APP_INFO_PLIST):
            found.add(markers["info_plist"])
            if config.has_info_plist:
                return SKIP

        if under(relative, APP_PKG_INFO):
            found.add(markers["pkg_info"])
            if config.has_pkg_info:
                return SKIP

        dest = relative
        if under(relative, binary_default):
            found.add(markers["binary"])
            if config.binary_name:
                dest = app_binary_path(config.binary_name)

        if under(relative, icon_default):
            found.add(markers["icon"])
            if config.has_icon:
                return SKIP
            if config.binary_name:
                dest = app_resource_path(app_icon_name(config))

        if under(relative, rsrc_default):
            found.add(markers["rsrc"])
            if config.binary_name:
                dest = app_resource_path(app_rsrc_name(config))

        return Claim(config.path / dest)

    # PkgInfo is missing from some skeleton releases.
    return SkeletonRules(
        handlers=(
            xtras_handler(XTRAS_DIR, mappings_from_include_xtras(config.include_xtras), xtras_path(config)),
            resources_handler,
        ),
        required=(
            resources_dir,
            markers["frameworks"],
            markers["binary"],
            markers["info_plist"],
            markers["icon"],
            markers["rsrc"],
            XTRAS_DIR,
        ),
    )


def write_mac_skeleton(build: ProjectorBuild) -> None:
    config = build.config
    assert isinstance(config, MacProjectorConfig)
    build.stream_skeleton(mac_skeleton_rules(config))


def _pkg_info_data(config: MacProjectorConfig) -> bytes | None:
    if isinstance(config.pkg_info_data, str):
        return config.pkg_info_data.encode("ascii")
    return resolve_payload(config.pkg_info_data, config.pkg_info_file, MAC_NEWLINE)


def generate_info_plist(config: MacProjectorConfig) -> bytes | None:
    """
    Build the projector's Info.plist, if anything about it changes.

    Starts from the custom plist when one is configured, otherwise from the
    extracted one, and sets CFBundleIconFile, CFBundleExecutable and
    CFBundleName as configured.

    Returns:
        Serialized XML plist, or None when the extracted one stays as is
    """
    custom = resolve_payload(config.info_plist_data, config.info_plist_file, MAC_NEWLINE)
    bundle_name = bundle_name_value(config)
    if custom is None and not config.binary_name and bundle_name is False:
        return None

    source = custom if custom is not None else (config.path / APP_INFO_PLIST).read_bytes()
    plist: dict[str, Any] = plistlib.loads(source)

    if config.binary_name:
        plist["CFBundleIconFile"] = app_icon_name(config)
        plist["CFBundleExecutable"] = config.binary_name

    if bundle_name is None:
        plist.pop("CFBundleName", None)
    elif bundle_name is not False:
        plist["CFBundleName"] = bundle_name

    return plistlib.dumps(plist, fmt=plistlib.FMT_XML)


def modify_mac_skeleton(build: ProjectorBuild) -> None:
    """Write the custom icon and PkgInfo, then rewrite Info.plist if needed."""
    config = build.config
    assert isinstance(config, MacProjectorConfig)

    icon = resolve_payload(config.icon_data, config.icon_file)
    if icon is not None:
        icon_path = config.path / app_resource_path(app_icon_name(config))
        write_file(icon_path, icon)
        logger.debug("Wrote app icon", path=str(icon_path), size=len(icon))

    pkg_info = _pkg_info_data(config)
    if pkg_info is not None:
        write_file(config.path / APP_PKG_INFO, pkg_info)
        logger.debug("Wrote PkgInfo", size=len(pkg_info))

    info_plist = generate_info_plist(config)
    if info_plist is not None:
        plist_path = config.path / APP_INFO_PLIST
        plist_path.unlink(missing_ok=True)
        write_file(plist_path, info_plist)
        logger.debug("Wrote Info.plist", path=str(plist_path), bundle_name=bundle_name_value(config))


def write_mac_launcher(config: ProjectorConfig, launcher_path: Path) -> None:
    """
    Write an outer app that launches the nested projector app.

    The launcher binary matches the projector binary's architectures, thin
    or FAT. Info.plist, PkgInfo and the icon are copied from the projector.
    """
    assert isinstance(config, MacProjectorConfig)
    binary = app_binary_path(app_binary_name(config))
    types = macho_types_file(config.path / binary)
    data = macho_app_launcher(types)
    write_file(launcher_path / binary, data, DEFAULT_EXECUTABLE_PERMS)

    for relative in (APP_INFO_PLIST, APP_PKG_INFO, app_resource_path(app_icon_name(config))):
        source = config.path / relative
        if not source.is_file():
            continue
        dest = launcher_path / relative
        ensure_parent_dir(dest)
        safe_copy(source, dest, preserve_mode=True, overwrite=True)

    logger.info("Wrote launcher", path=str(launcher_path), binary=binary, size=len(data))


# 🌶️📦🔚
