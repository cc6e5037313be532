#
# SPDX-FileCopyrightText: Copyright (c) 2025 provide.io llc. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
#

"""Immutable build configuration for projectors.

One record is created per build and handed to the build engine as a whole.
Use ``attrs.evolve`` to derive a modified copy.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from pathlib import Path

from attrs import define, field

from dirprojector.config.defaults import HTML_CLASSID, HTML_TYPE
from dirprojector.utils.data import PayloadData


def _optional_path(value: str | Path | None) -> Path | None:
    return None if value is None else Path(value)


@define(frozen=True)
class ProjectorConfig:
    """
    Options shared by all skeleton-based projectors.

    Every optional payload has a ``*_data`` and a ``*_file`` source. Data
    wins over file, and when neither is set the artifact is not written.
    """

    path: Path = field(converter=Path)
    skeleton: Path | None = field(default=None, converter=_optional_path)

    movie_data: PayloadData | None = None
    movie_file: Path | None = field(default=None, converter=_optional_path)
    movie_name: str | None = None  # written next to the projector

    config_data: PayloadData | None = None
    config_file: Path | None = field(default=None, converter=_optional_path)
    lingo_data: PayloadData | None = None
    lingo_file: Path | None = field(default=None, converter=_optional_path)
    splash_image_data: PayloadData | None = None
    splash_image_file: Path | None = field(default=None, converter=_optional_path)

    include_xtras: Mapping[str, str | None] | None = None
    nest_xtras_configuration: bool = False
    shockwave: bool = False

    nobrowse: bool = True
    path_to_hdiutil: str | None = None


@define(frozen=True)
class WindowsProjectorConfig(ProjectorConfig):
    """Options for Windows projectors (``WINDOWS_EXE`` and ``OTTO_WINDOWS``)."""

    icon_data: PayloadData | None = None
    icon_file: Path | None = field(default=None, converter=_optional_path)
    version_strings: Mapping[str, str] | None = None
    patch_3d_display_drivers_size: bool = False

    @property
    def has_resource_edits(self) -> bool:
        return self.icon_data is not None or self.icon_file is not None or bool(self.version_strings)


@define(frozen=True)
class MacProjectorConfig(ProjectorConfig):
    """
    Options for Mac app projectors (``MAC_APP`` and ``OTTO_MAC``).

    Attributes:
        binary_name: Rename the app binary, icon and rsrc to this name
        intel: Read the skeleton's "Projector Intel Resources" tree
        bundle_name: CFBundleName handling. False leaves it, True uses the
            output name without ``.app``, None removes it, a string sets it
        nest_xtras_contents: Put Xtras in ``Contents/xtras`` of the app
    """

    binary_name: str | None = None
    intel: bool = False
    icon_data: PayloadData | None = None
    icon_file: Path | None = field(default=None, converter=_optional_path)
    info_plist_data: PayloadData | None = None
    info_plist_file: Path | None = field(default=None, converter=_optional_path)
    pkg_info_data: PayloadData | None = None
    pkg_info_file: Path | None = field(default=None, converter=_optional_path)
    bundle_name: bool | str | None = False
    nest_xtras_contents: bool = False

    @property
    def has_icon(self) -> bool:
        return self.icon_data is not None or self.icon_file is not None

    @property
    def has_info_plist(self) -> bool:
        return self.info_plist_data is not None or self.info_plist_file is not None

    @property
    def has_pkg_info(self) -> bool:
        return self.pkg_info_data is not None or self.pkg_info_file is not None


HtmlAttribute = str | int | bool | None


@define(frozen=True)
class HtmlProjectorConfig:
    """
    Options for an HTML page embedding a Shockwave movie.

    ``src``, ``width`` and ``height`` are required at write time. ``html``
    replaces the generated document, either as a string or as a callable
    receiving this config.
    """

    path: Path = field(converter=Path)
    src: str = ""
    width: str | int | None = None
    height: str | int | None = None

    lang: str | None = None
    title: str | None = None
    background: str | None = None
    color: str | None = None

    classid: str = HTML_CLASSID
    type: str = HTML_TYPE
    codebase: str | None = None
    pluginspage: str | None = None
    name: str | None = None
    id: str | None = None

    bgcolor: str | None = None
    sw_stretch_style: str | None = None
    sw_stretch_h_align: str | None = None
    sw_stretch_v_align: str | None = None
    sw_remote: str | None = None
    sw1: str | None = None
    sw2: str | None = None
    sw3: str | None = None
    sw4: str | None = None
    sw5: str | None = None
    sw6: str | None = None
    sw7: str | None = None
    sw8: str | None = None
    sw9: str | None = None
    progress: HtmlAttribute = None
    logo: HtmlAttribute = None
    player_version: HtmlAttribute = None

    html: str | Callable[[HtmlProjectorConfig], str] | None = None


AnyProjectorConfig = ProjectorConfig | HtmlProjectorConfig

# 🌶️📦🔚
