#
# SPDX-FileCopyrightText: Copyright (c) 2025 provide.io llc. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
#

"""Fixed-width byte-pattern patching for legacy Windows Xtras."""

from dirprojector.patcher.core import find_patch_site, patch_bytes_once, patch_file_once, patch_once
from dirprojector.patcher.templates import (
    SHOCKWAVE_3D_DISPLAY_DRIVERS_SIZE_NAME,
    SHOCKWAVE_3D_DISPLAY_DRIVERS_SIZE_TEMPLATES,
    PatchTemplate,
    hex_template,
)

__all__ = [
    "SHOCKWAVE_3D_DISPLAY_DRIVERS_SIZE_NAME",
    "SHOCKWAVE_3D_DISPLAY_DRIVERS_SIZE_TEMPLATES",
    "PatchTemplate",
    "find_patch_site",
    "hex_template",
    "patch_bytes_once",
    "patch_file_once",
    "patch_once",
]
