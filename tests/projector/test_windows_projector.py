#
# SPDX-FileCopyrightText: Copyright (c) 2025 provide.io llc. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
#

"""End-to-end tests for Windows projectors built from synthetic skeletons."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

from conftest import (
    LANG_EN_US,
    SHOCKWAVE_3D_SITE,
    SHOCKWAVE_3D_SITE_PATCHED,
    build_ico,
)
import pytest

from dirprojector.exceptions import (
    MissingSkeletonEntryError,
    OutputAlreadyExistsError,
    PatchTargetNotFoundError,
)
from dirprojector.pe_utils import RT_ICON, VersionInfo, icon_groups, read_resources
from dirprojector.projector import BuildState, Variant, WindowsProjectorConfig, write_projector

WINDOWS_VARIANTS = [Variant.WINDOWS_EXE, Variant.OTTO_WINDOWS]


@pytest.fixture
def out_dir(temp_dir: Path) -> Path:
    path = temp_dir / "out"
    path.mkdir()
    return path


@pytest.mark.parametrize("variant", WINDOWS_VARIANTS)
class TestWindowsProjector:
    """Test both Windows variants against the same skeleton."""

    def test_basic_build(self, variant: Variant, windows_skeleton: Callable[..., Path], out_dir: Path) -> None:
        config_ini = b"[Settings]\r\nMovie=movie.dir\r\n"
        (out_dir.parent / "config.ini").write_bytes(config_ini)
        config = WindowsProjectorConfig(
            path=out_dir / "app.exe",
            skeleton=windows_skeleton(),
            config_file=out_dir.parent / "config.ini",
        )

        build = write_projector(variant, config)

        assert build.state is BuildState.FINALIZED
        assert (out_dir / "app.exe").read_bytes()[:2] == b"MZ"
        assert (out_dir / "Proj.dll").read_bytes() == b"DLL"
        assert (out_dir / "app.INI").read_bytes() == config_ini
        assert not (out_dir / "ReadMe.txt").exists()
        assert not (out_dir / "xtras").exists()
        assert not (out_dir / "LINGO.INI").exists()
        assert not (out_dir / "app.BMP").exists()

    def test_lines_use_crlf(self, variant: Variant, windows_skeleton: Callable[..., Path], out_dir: Path) -> None:
        config = WindowsProjectorConfig(
            path=out_dir / "app.exe",
            skeleton=windows_skeleton(),
            config_data=["[Settings]", "Movie=movie.dir"],
            lingo_data=["on startMovie", "end"],
            splash_image_data=b"BM",
        )
        write_projector(variant, config)
        assert (out_dir / "app.INI").read_bytes() == b"[Settings]\r\nMovie=movie.dir"
        assert (out_dir / "LINGO.INI").read_bytes() == b"on startMovie\r\nend"
        assert (out_dir / "app.BMP").read_bytes() == b"BM"

    def test_catch_all_xtras(self, variant: Variant, windows_skeleton: Callable[..., Path], out_dir: Path) -> None:
        config = WindowsProjectorConfig(
            path=out_dir / "app.exe",
            skeleton=windows_skeleton(),
            include_xtras={"": None},
            nest_xtras_configuration=True,
        )
        write_projector(variant, config)
        xtras = out_dir / "Configuration" / "xtras"
        assert (xtras / "NetLingo.x32").read_bytes() == b"NETLINGO"
        assert (xtras / "Net Support" / "INetURL.x32").read_bytes() == b"INETURL"
        assert (xtras / "Media Support" / "Shockwave 3D Asset.x32").exists()

    def test_mapped_xtras(self, variant: Variant, windows_skeleton: Callable[..., Path], out_dir: Path) -> None:
        config = WindowsProjectorConfig(
            path=out_dir / "app.exe",
            skeleton=windows_skeleton(),
            include_xtras={"Net Support": "Net"},
        )
        write_projector(variant, config)
        assert (out_dir / "xtras" / "Net" / "INetURL.x32").read_bytes() == b"INETURL"
        assert not (out_dir / "xtras" / "NetLingo.x32").exists()

    def test_shockwave_excludes_dlls(self, variant: Variant, windows_skeleton: Callable[..., Path], out_dir: Path) -> None:
        config = WindowsProjectorConfig(path=out_dir / "app.exe", skeleton=windows_skeleton(), shockwave=True)
        write_projector(variant, config)
        assert not (out_dir / "Proj.dll").exists()

    def test_resource_edits(self, variant: Variant, windows_skeleton: Callable[..., Path], out_dir: Path) -> None:
        config = WindowsProjectorConfig(
            path=out_dir / "app.exe",
            skeleton=windows_skeleton(),
            icon_data=build_ico((32,)),
            version_strings={"FileVersion": "1.2.3.4", "ProductName": "My Game"},
        )
        write_projector(variant, config)

        entries = read_resources((out_dir / "app.exe").read_bytes())
        icons = [e for e in entries if e.type == RT_ICON]
        assert [e.data for e in icons] == [bytes([32]) * 64]
        assert icon_groups(entries)[0].members[0].width == 32
        info = VersionInfo.from_entries(entries)[0]
        assert info.get_string_values(LANG_EN_US, 0x4B0)["ProductName"] == "My Game"
        assert (info.fixed.file_version_ms, info.fixed.file_version_ls) == (0x00010002, 0x00030004)

    def test_3d_driver_patch(self, variant: Variant, windows_skeleton: Callable[..., Path], out_dir: Path) -> None:
        config = WindowsProjectorConfig(
            path=out_dir / "app.exe",
            skeleton=windows_skeleton(),
            include_xtras={"Media Support": None},
            patch_3d_display_drivers_size=True,
        )
        write_projector(variant, config)
        asset = (out_dir / "xtras" / "Media Support" / "Shockwave 3D Asset.x32").read_bytes()
        assert SHOCKWAVE_3D_SITE_PATCHED in asset
        assert SHOCKWAVE_3D_SITE not in asset

    def test_3d_driver_patch_without_asset(
        self, variant: Variant, windows_skeleton: Callable[..., Path], out_dir: Path
    ) -> None:
        config = WindowsProjectorConfig(
            path=out_dir / "app.exe",
            skeleton=windows_skeleton(with_3d_asset=False),
            include_xtras={"": None},
            patch_3d_display_drivers_size=True,
        )
        with pytest.raises(PatchTargetNotFoundError, match="Shockwave 3D Asset.x32"):
            write_projector(variant, config)

    def test_second_build_refuses_existing_output(
        self, variant: Variant, windows_skeleton: Callable[..., Path], out_dir: Path
    ) -> None:
        config = WindowsProjectorConfig(path=out_dir / "app.exe", skeleton=windows_skeleton())
        write_projector(variant, config)
        with pytest.raises(OutputAlreadyExistsError, match="app.exe"):
            write_projector(variant, config)

    def test_missing_skl(self, variant: Variant, temp_dir: Path, out_dir: Path) -> None:
        skeleton = temp_dir / "empty-skeleton"
        skeleton.mkdir()
        config = WindowsProjectorConfig(path=out_dir / "app.exe", skeleton=skeleton)
        with pytest.raises(MissingSkeletonEntryError) as exc_info:
            write_projector(variant, config)
        assert exc_info.value.missing == ["Projec32.skl", "xtras"]


def test_otto_patches_applied_while_streaming(
    windows_skeleton: Callable[..., Path], temp_dir: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    """The Otto variant never rewrites the extracted projector."""
    import dirprojector.projector.windows as windows_module

    monkeypatch.setattr(windows_module, "atomic_write", _fail_atomic_write)
    config = WindowsProjectorConfig(
        path=temp_dir / "app.exe",
        skeleton=windows_skeleton(),
        version_strings={"CompanyName": "Example"},
    )
    write_projector(Variant.OTTO_WINDOWS, config)
    info = VersionInfo.from_entries(read_resources((temp_dir / "app.exe").read_bytes()))[0]
    assert info.get_string_values(LANG_EN_US, 0x4B0)["CompanyName"] == "Example"


def _fail_atomic_write(path: Path, data: bytes) -> None:
    raise AssertionError(f"unexpected rewrite of {path}")


# 🌶️📦🔚
