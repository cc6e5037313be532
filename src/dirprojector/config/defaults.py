#
# SPDX-FileCopyrightText: Copyright (c) 2025 provide.io llc. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
#

"""Centralized default values for dirprojector."""

from __future__ import annotations

# =================================
# Output file layout
# =================================
CONFIG_EXTENSION = ".INI"
LINGO_NAME = "LINGO.INI"
XTRAS_DIR = "xtras"
CONFIGURATION_DIR = "Configuration"

WINDOWS_EXTENSION = ".exe"
WINDOWS_NEWLINE = "\r\n"
WINDOWS_SPLASH_EXTENSION = ".BMP"
WINDOWS_SKL_NAME = "Projec32.skl"
WINDOWS_SHOCKWAVE_3D_ASSET_NAME = "Shockwave 3D Asset.x32"

MAC_EXTENSION = ".app"
MAC_NEWLINE = "\n"
MAC_SPLASH_EXTENSION = ".pict"
MAC_RESOURCES_DIR = "Projector Resources"
MAC_INTEL_RESOURCES_DIR = "Projector Intel Resources"
MAC_BINARY_NAME = "Projector"
MAC_ICON_NAME = "projector.icns"
MAC_RSRC_NAME = "Projector.rsrc"

HTML_EXTENSION = ".html"
HTML_CLASSID = "clsid:166B1BCA-3F9C-11CF-8075-444553540000"
HTML_TYPE = "application/x-director"

# =================================
# File permissions defaults
# =================================
DEFAULT_FILE_PERMS = 0o644
DEFAULT_EXECUTABLE_PERMS = 0o755
USER_EXECUTE_BIT = 0o100

# =================================
# Bundle resource exclusions
# =================================
RESOURCE_EXCLUDE_PATTERNS = (r"^\.", r"^ehthumbs\.db$", r"^Thumbs\.db$")

# =================================
# Disk images
# =================================
DEFAULT_HDIUTIL = "hdiutil"

# 🌶️📦🔚
