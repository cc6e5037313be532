#
# SPDX-FileCopyrightText: Copyright (c) 2025 provide.io llc. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
#

"""Tests for launcher stub lookup and Windows launcher selection."""

from __future__ import annotations

from pathlib import Path
import zlib

from conftest import build_pe, projector_resources
import pytest

from dirprojector.exceptions import LauncherNotFoundError, UnknownMachineTypeError
from dirprojector.launchers import (
    find_launcher,
    launcher_search_dirs,
    launcher_type_for_executable,
    load_launcher_binary,
    windows_launcher,
)
from dirprojector.pe_utils import RT_GROUP_ICON, RT_ICON, RT_VERSION, read_resources


def _raw_deflate(data: bytes) -> bytes:
    compressor = zlib.compressobj(wbits=-15)
    return compressor.compress(data) + compressor.flush()


class TestLauncherLoader:
    """Test stub lookup through the environment override."""

    def test_override_dir_searched_first(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DIRPROJECTOR_LAUNCHERS_DIR", str(tmp_path))
        assert launcher_search_dirs()[0] == tmp_path

    def test_load_inflates_stub(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DIRPROJECTOR_LAUNCHERS_DIR", str(tmp_path))
        (tmp_path / "mac-app-test").write_bytes(_raw_deflate(b"stub data" * 10))
        assert find_launcher("mac-app-test") == tmp_path / "mac-app-test"
        assert load_launcher_binary("mac-app-test") == b"stub data" * 10

    def test_missing_stub(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DIRPROJECTOR_LAUNCHERS_DIR", str(tmp_path))
        with pytest.raises(LauncherNotFoundError, match="'no-such-launcher' not found"):
            find_launcher("no-such-launcher")


class TestWindowsLauncher:
    """Test Windows launcher selection and resource copying."""

    def test_type_for_i386(self, tmp_path: Path) -> None:
        exe = tmp_path / "app.exe"
        exe.write_bytes(build_pe(projector_resources()))
        assert launcher_type_for_executable(exe) == "i686"

    def test_unknown_machine(self, tmp_path: Path) -> None:
        exe = tmp_path / "app.exe"
        exe.write_bytes(build_pe(projector_resources(), machine=0x8664))
        with pytest.raises(UnknownMachineTypeError, match="0x8664"):
            launcher_type_for_executable(exe)

    def test_invalid_arch(self) -> None:
        with pytest.raises(ValueError, match="Invalid launcher type"):
            windows_launcher("arm64")

    def test_copies_projector_resources(self, tmp_path: Path) -> None:
        exe = tmp_path / "app.exe"
        exe.write_bytes(build_pe(projector_resources()))
        launcher = windows_launcher("i686", resources=exe)
        assert {e.type for e in read_resources(launcher)} == {RT_ICON, RT_GROUP_ICON, RT_VERSION}


# 🌶️📦🔚
