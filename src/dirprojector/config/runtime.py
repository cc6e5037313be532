#
# SPDX-FileCopyrightText: Copyright (c) 2025 provide.io llc. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
#

"""dirprojector runtime configuration loaded from the environment."""

from __future__ import annotations

from attrs import define
from provide.foundation.config.base import field
from provide.foundation.config.env import RuntimeConfig

from dirprojector.config.defaults import DEFAULT_HDIUTIL

VALID_LOG_LEVELS = {"TRACE", "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def parse_log_level(value: str) -> str:
    """Validate and normalize log levels."""
    normalized = value.strip().upper()
    if normalized not in VALID_LOG_LEVELS:
        raise ValueError(f"Invalid log level: {value}")
    return normalized


def parse_optional_path(value: str | None) -> str | None:
    """Treat empty strings as unset."""
    if value is None:
        return None
    value = value.strip()
    return value or None


@define
class DirProjectorRuntimeConfig(RuntimeConfig):
    """dirprojector runtime configuration for CLI startup and builds."""

    log_level: str = field(
        default="WARNING",
        env_var="DIRPROJECTOR_LOG_LEVEL",
        converter=parse_log_level,
        metadata={"help": "Log level for dirprojector operations (TRACE, DEBUG, INFO, WARNING, ERROR, CRITICAL)"},
    )

    launchers_dir: str | None = field(
        default=None,
        env_var="DIRPROJECTOR_LAUNCHERS_DIR",
        converter=parse_optional_path,
        metadata={"help": "Directory searched for launcher stubs before the bundled ones"},
    )

    hdiutil: str = field(
        default=DEFAULT_HDIUTIL,
        env_var="DIRPROJECTOR_HDIUTIL",
        metadata={"help": "Path to the hdiutil binary used to mount dmg skeletons"},
    )


# 🌶️📦🔚
