#
# SPDX-FileCopyrightText: Copyright (c) 2025 provide.io llc. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
#

"""dirprojector core package exports."""

from __future__ import annotations

from provide.foundation.utils import get_version

from dirprojector.bundle import Bundle, ResourceOptions
from dirprojector.exceptions import ConfigurationError, ProjectorError
from dirprojector.projector import (
    HtmlProjectorConfig,
    MacProjectorConfig,
    ProjectorBuild,
    ProjectorConfig,
    Variant,
    WindowsProjectorConfig,
    write_projector,
)

__version__ = get_version("dirprojector", caller_file=__file__)

__all__ = [
    "Bundle",
    "ConfigurationError",
    "HtmlProjectorConfig",
    "MacProjectorConfig",
    "ProjectorBuild",
    "ProjectorConfig",
    "ProjectorError",
    "ResourceOptions",
    "Variant",
    "WindowsProjectorConfig",
    "__version__",
    "write_projector",
]

# 🌶️📦🔚
