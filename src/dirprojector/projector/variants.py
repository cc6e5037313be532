#
# SPDX-FileCopyrightText: Copyright (c) 2025 provide.io llc. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
#

"""Projector variants and what each one does at every build step."""

from __future__ import annotations

from collections.abc import Callable
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING

from attrs import define

from dirprojector.config.defaults import (
    HTML_EXTENSION,
    MAC_EXTENSION,
    MAC_NEWLINE,
    MAC_SPLASH_EXTENSION,
    WINDOWS_EXTENSION,
    WINDOWS_NEWLINE,
    WINDOWS_SPLASH_EXTENSION,
)
from dirprojector.exceptions import ConfigurationError
from dirprojector.projector.config import (
    AnyProjectorConfig,
    HtmlProjectorConfig,
    MacProjectorConfig,
    WindowsProjectorConfig,
)
from dirprojector.projector.html import write_html_launcher, write_html_projector
from dirprojector.projector.mac import (
    modify_mac_skeleton,
    write_mac_launcher,
    write_mac_skeleton,
)
from dirprojector.projector.patches import FilePatch
from dirprojector.projector.windows import (
    modify_windows_skeleton,
    windows_file_patches,
    write_windows_launcher,
    write_windows_skeleton,
)
from dirprojector.utils.paths import trim_extension

if TYPE_CHECKING:
    from dirprojector.projector.engine import ProjectorBuild

BuildStep = Callable[["ProjectorBuild"], None]
PatchFactory = Callable[..., list[FilePatch]]
LauncherWriter = Callable[[AnyProjectorConfig, Path], None]


class Variant(Enum):
    """The closed set of projector targets."""

    HTML = "html"
    MAC_APP = "mac-app"
    WINDOWS_EXE = "windows-exe"
    OTTO_MAC = "otto-mac"
    OTTO_WINDOWS = "otto-windows"


@define(frozen=True)
class Capabilities:
    """
    Per-variant behaviour consumed by the build engine and bundles.

    Attributes:
        extension: Projector file extension
        config_newline: Separator for config payloads given as lines
        lingo_newline: Separator for LINGO.INI payloads given as lines
        splash_image_extension: Extension of the splash image sibling
        config_type: Config record the variant accepts
        write_skeleton: Produces the projector itself
        modify_skeleton: Edits the written projector, if anything
        file_patches: Patches applied while the skeleton streams
        write_launcher: Writes a bundle's outer launcher
        nested_path: Maps a bundle path to its nested projector path
    """

    extension: str
    config_newline: str
    lingo_newline: str
    splash_image_extension: str
    config_type: type
    write_skeleton: BuildStep
    modify_skeleton: BuildStep | None = None
    file_patches: PatchFactory | None = None
    write_launcher: LauncherWriter | None = None
    nested_path: Callable[[Path], Path] | None = None


def _nested_in_directory(extension: str) -> Callable[[Path], Path]:
    """``dir/app.ext`` becomes ``dir/app/app.ext``."""

    def nested(path: Path) -> Path:
        directory = trim_extension(str(path), extension, nocase=True)
        if directory == str(path):
            raise ConfigurationError(f"Output path must end with: {extension}")
        return Path(directory) / path.name

    return nested


def _nested_in_app(path: Path) -> Path:
    """``app.app`` becomes ``app.app/Contents/Resources/app.app``."""
    if not path.name.lower().endswith(MAC_EXTENSION):
        raise ConfigurationError(f"Output path must end with: {MAC_EXTENSION}")
    return path / "Contents" / "Resources" / path.name


_WINDOWS = {
    "extension": WINDOWS_EXTENSION,
    "config_newline": WINDOWS_NEWLINE,
    "lingo_newline": WINDOWS_NEWLINE,
    "splash_image_extension": WINDOWS_SPLASH_EXTENSION,
    "config_type": WindowsProjectorConfig,
    "write_skeleton": write_windows_skeleton,
}

_MAC = {
    "extension": MAC_EXTENSION,
    "config_newline": MAC_NEWLINE,
    "lingo_newline": MAC_NEWLINE,
    "splash_image_extension": MAC_SPLASH_EXTENSION,
    "config_type": MacProjectorConfig,
    "write_skeleton": write_mac_skeleton,
    "modify_skeleton": modify_mac_skeleton,
}

CAPABILITIES: dict[Variant, Capabilities] = {
    Variant.HTML: Capabilities(
        extension=HTML_EXTENSION,
        config_newline="\n",
        lingo_newline="\n",
        splash_image_extension="",
        config_type=HtmlProjectorConfig,
        write_skeleton=write_html_projector,
        write_launcher=write_html_launcher,
        nested_path=_nested_in_directory(HTML_EXTENSION),
    ),
    Variant.WINDOWS_EXE: Capabilities(**_WINDOWS, modify_skeleton=modify_windows_skeleton),
    Variant.OTTO_WINDOWS: Capabilities(
        **_WINDOWS,
        file_patches=windows_file_patches,
        write_launcher=write_windows_launcher,
        nested_path=_nested_in_directory(WINDOWS_EXTENSION),
    ),
    Variant.MAC_APP: Capabilities(**_MAC),
    Variant.OTTO_MAC: Capabilities(**_MAC, write_launcher=write_mac_launcher, nested_path=_nested_in_app),
}


def capabilities_for(variant: Variant) -> Capabilities:
    return CAPABILITIES[variant]


def check_config_type(variant: Variant, config: AnyProjectorConfig) -> None:
    """
    Raises:
        ConfigurationError: If config is not the record the variant expects
    """
    expected = CAPABILITIES[variant].config_type
    if not isinstance(config, expected):
        raise ConfigurationError(
            f"{variant.name} projectors need a {expected.__name__}, got {type(config).__name__}"
        )


# 🌶️📦🔚
