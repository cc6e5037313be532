#
# SPDX-FileCopyrightText: Copyright (c) 2025 provide.io llc. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
#

"""Tests for resource option expansion and attribute application."""

from __future__ import annotations

from datetime import datetime, timezone
import os
from pathlib import Path

import pytest

from dirprojector.bundle import DeferredAttributes, ResourceOptions, expand_copy_options, set_resource_attributes
from dirprojector.bundle.resources import mode_with_executable


class TestExpandCopyOptions:
    """Test copying attributes from a source file."""

    @pytest.fixture
    def source(self, temp_dir: Path) -> Path:
        path = temp_dir / "source"
        path.write_bytes(b"")
        path.chmod(0o644)
        os.utime(path, (100, 200))
        return path

    def test_nothing_to_copy_returns_same(self, source: Path) -> None:
        options = ResourceOptions(mtime=5)
        assert expand_copy_options(options, source) is options

    def test_copies_marked_attributes(self, source: Path) -> None:
        options = expand_copy_options(
            ResourceOptions(atime_copy=True, mtime_copy=True, executable_copy=True),
            source,
        )
        assert options.atime == 100
        assert options.mtime == 200
        assert options.executable is False

    def test_explicit_values_win(self, source: Path) -> None:
        options = expand_copy_options(ResourceOptions(mtime=5, mtime_copy=True, executable=True, executable_copy=True), source)
        assert options.mtime == 5
        assert options.executable is True


class TestSetResourceAttributes:
    """Test applying attributes to paths."""

    def test_datetime_timestamps(self, temp_dir: Path) -> None:
        path = temp_dir / "file"
        path.write_bytes(b"")
        when = datetime(2001, 2, 3, tzinfo=timezone.utc)
        set_resource_attributes(path, ResourceOptions(mtime=when))
        assert path.stat().st_mtime == when.timestamp()

    def test_clear_executable(self, temp_dir: Path) -> None:
        path = temp_dir / "file"
        path.write_bytes(b"")
        path.chmod(0o755)
        set_resource_attributes(path, ResourceOptions(executable=False))
        assert path.stat().st_mode & 0o777 == 0o655

    def test_directories_keep_mode(self, temp_dir: Path) -> None:
        path = temp_dir / "dir"
        path.mkdir()
        before = path.stat().st_mode
        set_resource_attributes(path, ResourceOptions(executable=False))
        assert path.stat().st_mode == before

    def test_symlink_target_untouched(self, temp_dir: Path) -> None:
        target = temp_dir / "target"
        target.write_bytes(b"")
        os.utime(target, (10, 10))
        link = temp_dir / "link"
        link.symlink_to(target)
        set_resource_attributes(link, ResourceOptions(mtime=50))
        assert target.stat().st_mtime == 10

    @pytest.mark.parametrize(
        ("mode", "executable", "expected"),
        [(0o644, True, 0o744), (0o755, False, 0o655), (0o744, True, 0o744)],
    )
    def test_mode_with_executable(self, mode: int, executable: bool, expected: int) -> None:
        assert mode_with_executable(mode, executable) == expected


class TestDeferredAttributes:
    """Test deferred directory attributes."""

    def test_applied_deepest_first(self, temp_dir: Path) -> None:
        outer = temp_dir / "outer"
        inner = outer / "inner"
        inner.mkdir(parents=True)
        deferred = DeferredAttributes()
        deferred.add(outer, ResourceOptions(mtime=100))
        deferred.add(inner, ResourceOptions(mtime=200))
        deferred.apply()
        assert outer.stat().st_mtime == 100
        assert inner.stat().st_mtime == 200
        assert deferred.pending == []

    def test_clear(self, temp_dir: Path) -> None:
        deferred = DeferredAttributes()
        deferred.add(temp_dir, ResourceOptions(mtime=1))
        deferred.clear()
        assert deferred.pending == []


# 🌶️📦🔚
