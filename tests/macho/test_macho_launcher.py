#
# SPDX-FileCopyrightText: Copyright (c) 2025 provide.io llc. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
#

"""Tests for Mach-O type detection and launcher synthesis."""

from __future__ import annotations

from pathlib import Path
import struct

from conftest import MOCK_MAC_LAUNCHERS, build_macho_fat, build_macho_thin
import pytest

from dirprojector.exceptions import MalformedExecutableError, UnknownCpuTypeError, UnknownHeaderMagicError
from dirprojector.macho import (
    CPU_TYPE_I386,
    CPU_TYPE_POWERPC,
    FAT_ALIGN,
    MachoType,
    macho_app_launcher,
    macho_types_data,
    macho_types_file,
)

PPC = MachoType(CPU_TYPE_POWERPC, 0)
I386 = MachoType(CPU_TYPE_I386, 3)


class TestMachoTypes:
    """Test reading architecture types."""

    def test_thin_big_endian(self) -> None:
        assert macho_types_data(build_macho_thin(CPU_TYPE_POWERPC, 0)) == PPC

    def test_thin_little_endian(self) -> None:
        data = struct.pack("<III", 0xFEEDFACE, CPU_TYPE_I386, 3)
        assert macho_types_data(data) == I386

    def test_fat(self) -> None:
        data = build_macho_fat([(CPU_TYPE_POWERPC, 0), (CPU_TYPE_I386, 3)])
        assert macho_types_data(data) == [PPC, I386]

    def test_unknown_magic(self) -> None:
        with pytest.raises(UnknownHeaderMagicError, match="0x4d5a9000"):
            macho_types_data(b"MZ\x90\x00")

    @pytest.mark.parametrize(
        "data",
        [
            struct.pack(">I", 0xFEEDFACE),
            struct.pack("<II", 0xFEEDFACF, CPU_TYPE_I386),
            struct.pack(">I", 0xCAFEBABE) + b"\x00\x00",
        ],
    )
    def test_truncated_header(self, data: bytes) -> None:
        with pytest.raises(MalformedExecutableError, match="Truncated"):
            macho_types_data(data)

    def test_truncated_fat_arch_table(self) -> None:
        data = build_macho_fat([(CPU_TYPE_POWERPC, 0), (CPU_TYPE_I386, 3)])[:-8]
        with pytest.raises(MalformedExecutableError, match="2 entries declared"):
            macho_types_data(data)

    def test_truncated_file(self, tmp_path: Path) -> None:
        path = tmp_path / "short"
        path.write_bytes(build_macho_fat([(CPU_TYPE_I386, 3)])[:12])
        with pytest.raises(MalformedExecutableError):
            macho_types_file(path)

    def test_from_file(self, tmp_path: Path) -> None:
        thin = tmp_path / "thin"
        thin.write_bytes(build_macho_thin(CPU_TYPE_I386, 3))
        fat = tmp_path / "fat"
        fat.write_bytes(build_macho_fat([(CPU_TYPE_I386, 3), (CPU_TYPE_POWERPC, 0)]) + b"\x00" * 64)
        assert macho_types_file(thin) == I386
        assert macho_types_file(fat) == [I386, PPC]


class TestMachoAppLauncher:
    """Test launcher synthesis from thin stubs."""

    def test_thin(self) -> None:
        assert macho_app_launcher(I386) == MOCK_MAC_LAUNCHERS["mac-app-i386"]

    def test_fat_round_trip_and_alignment(self) -> None:
        data = macho_app_launcher([PPC, I386])
        assert macho_types_data(data) == [PPC, I386]

        bodies = [MOCK_MAC_LAUNCHERS["mac-app-ppc"], MOCK_MAC_LAUNCHERS["mac-app-i386"]]
        for i, body in enumerate(bodies):
            _, _, offset, size, align = struct.unpack_from(">IIIII", data, 8 + i * 20)
            assert align == FAT_ALIGN
            assert offset % (1 << FAT_ALIGN) == 0
            assert data[offset : offset + size] == body

    def test_unknown_cpu(self) -> None:
        with pytest.raises(UnknownCpuTypeError):
            macho_app_launcher(MachoType(0x01000007, 3))


# 🌶️📦🔚
