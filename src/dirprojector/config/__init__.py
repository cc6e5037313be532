#
# SPDX-FileCopyrightText: Copyright (c) 2025 provide.io llc. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
#

"""dirprojector configuration built on the Provide Foundation config stack."""

from __future__ import annotations

from dirprojector.config.runtime import DirProjectorRuntimeConfig, parse_log_level

__all__ = [
    "DirProjectorRuntimeConfig",
    "parse_log_level",
]

# 🌶️📦🔚
