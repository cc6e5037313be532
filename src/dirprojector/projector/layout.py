#
# SPDX-FileCopyrightText: Copyright (c) 2025 provide.io llc. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
#

"""Output paths derived from a projector config.

Sibling files share the projector's name without its extension:
``<name>.INI``, ``<name>.BMP`` or ``<name>.pict``, plus ``LINGO.INI`` and
the ``xtras`` directory in the same folder.
"""

from __future__ import annotations

from pathlib import Path

from dirprojector.config.defaults import (
    CONFIG_EXTENSION,
    CONFIGURATION_DIR,
    LINGO_NAME,
    XTRAS_DIR,
)
from dirprojector.projector.config import MacProjectorConfig, ProjectorConfig
from dirprojector.utils.paths import trim_extension


def projector_stem(path: Path, extension: str) -> str:
    """Projector path without its platform extension (case-insensitive)."""
    return trim_extension(str(path), extension, nocase=True)


def config_path(config: ProjectorConfig, extension: str) -> Path:
    return Path(projector_stem(config.path, extension) + CONFIG_EXTENSION)


def splash_image_path(config: ProjectorConfig, extension: str, splash_extension: str) -> Path:
    return Path(projector_stem(config.path, extension) + splash_extension)


def lingo_path(config: ProjectorConfig) -> Path:
    return config.path.parent / LINGO_NAME


def movie_path(config: ProjectorConfig) -> Path | None:
    if not config.movie_name:
        return None
    return config.path.parent / config.movie_name


def xtras_path(config: ProjectorConfig) -> Path:
    """
    Output directory for Xtras.

    Mac apps may nest them in ``Contents/xtras``; otherwise they sit next to
    the projector, optionally under ``Configuration``.
    """
    if isinstance(config, MacProjectorConfig) and config.nest_xtras_contents:
        return config.path / "Contents" / XTRAS_DIR
    base = config.path.parent
    if config.nest_xtras_configuration:
        base = base / CONFIGURATION_DIR
    return base / XTRAS_DIR


def sibling_output_paths(config: ProjectorConfig, extension: str, splash_extension: str) -> list[Path]:
    """Every path a build creates next to the projector, checked before writing."""
    paths = [
        config_path(config, extension),
        splash_image_path(config, extension, splash_extension),
        lingo_path(config),
    ]
    movie = movie_path(config)
    if movie is not None:
        paths.append(movie)
    return paths


# 🌶️📦🔚
