#
# SPDX-FileCopyrightText: Copyright (c) 2025 provide.io llc. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
#

"""Projector assembly: skeleton transform, platform edits and build engine."""

from __future__ import annotations

from dirprojector.projector.config import (
    HtmlProjectorConfig,
    MacProjectorConfig,
    ProjectorConfig,
    WindowsProjectorConfig,
)
from dirprojector.projector.engine import BuildState, ProjectorBuild, write_projector
from dirprojector.projector.html import generate_html
from dirprojector.projector.patches import FilePatch, PatchTally, validate_patches
from dirprojector.projector.variants import CAPABILITIES, Capabilities, Variant
from dirprojector.projector.xtras import (
    IncludeXtraMapping,
    XtraMatch,
    destination_for,
    find_best_match,
    mappings_from_include_xtras,
)

__all__ = [
    "CAPABILITIES",
    "BuildState",
    "Capabilities",
    "FilePatch",
    "HtmlProjectorConfig",
    "IncludeXtraMapping",
    "MacProjectorConfig",
    "PatchTally",
    "ProjectorBuild",
    "ProjectorConfig",
    "Variant",
    "WindowsProjectorConfig",
    "XtraMatch",
    "destination_for",
    "find_best_match",
    "generate_html",
    "mappings_from_include_xtras",
    "validate_patches",
    "write_projector",
]

# 🌶️📦🔚
