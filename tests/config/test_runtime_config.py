#
# SPDX-FileCopyrightText: Copyright (c) 2025 provide.io llc. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
#

"""Tests for environment-driven runtime configuration."""

from __future__ import annotations

import os
from unittest.mock import patch

import pytest

from dirprojector.config import DirProjectorRuntimeConfig, parse_log_level
from dirprojector.config.defaults import DEFAULT_HDIUTIL
from dirprojector.config.runtime import parse_optional_path


class TestRuntimeConfig:
    """Test runtime configuration."""

    def test_defaults(self) -> None:
        config = DirProjectorRuntimeConfig()
        assert config.log_level == "WARNING"
        assert config.launchers_dir is None
        assert config.hdiutil == DEFAULT_HDIUTIL

    @patch.dict(
        os.environ,
        {
            "DIRPROJECTOR_LOG_LEVEL": "debug",
            "DIRPROJECTOR_LAUNCHERS_DIR": "/opt/launchers",
            "DIRPROJECTOR_HDIUTIL": "/usr/local/bin/hdiutil",
        },
    )
    def test_from_env(self) -> None:
        config = DirProjectorRuntimeConfig.from_env()
        assert config.log_level == "DEBUG"
        assert config.launchers_dir == "/opt/launchers"
        assert config.hdiutil == "/usr/local/bin/hdiutil"

    @patch.dict(os.environ, {"DIRPROJECTOR_LAUNCHERS_DIR": "  "})
    def test_blank_launchers_dir_is_unset(self) -> None:
        assert DirProjectorRuntimeConfig.from_env().launchers_dir is None


class TestParsers:
    """Test value parsers."""

    @pytest.mark.parametrize(("value", "expected"), [("info", "INFO"), (" Trace ", "TRACE"), ("ERROR", "ERROR")])
    def test_parse_log_level(self, value: str, expected: str) -> None:
        assert parse_log_level(value) == expected

    def test_invalid_log_level(self) -> None:
        with pytest.raises(ValueError, match="Invalid log level: loud"):
            parse_log_level("loud")

    @pytest.mark.parametrize(("value", "expected"), [(None, None), ("", None), (" /x ", "/x")])
    def test_parse_optional_path(self, value: str | None, expected: str | None) -> None:
        assert parse_optional_path(value) == expected


# 🌶️📦🔚
