#
# SPDX-FileCopyrightText: Copyright (c) 2025 provide.io llc. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
#

"""Shared pytest fixtures and builders for dirprojector tests."""

from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping
from pathlib import Path
import plistlib
import shutil
import struct
import tempfile

import provide.testkit  # noqa: F401 - Installs setproctitle blocker early
from provide.testkit.logger import reset_foundation_setup_for_testing
import pytest

from dirprojector.macho.types import FAT_MAGIC, MH_MAGIC
from dirprojector.pe_utils import RT_GROUP_ICON, RT_ICON, RT_VERSION, ResourceEntry
from dirprojector.pe_utils.icons import IconGroup, IconGroupMember
from dirprojector.pe_utils.resources import build_resource_section
from dirprojector.pe_utils.version import FixedFileInfo, VersionNode

LANG_EN_US = 0x409
CODEPAGE_UNICODE = 0x4B0

FILE_ALIGNMENT = 0x200
SECTION_ALIGNMENT = 0x1000

# One instance of the oldest Shockwave 3D driver-size template
SHOCKWAVE_3D_SITE = bytes.fromhex("FF15 11223344 BE04010000 56 E8 55667788")
SHOCKWAVE_3D_SITE_PATCHED = bytes.fromhex("FF15 11223344 BE00000100 56 E8 55667788")

MOCK_MAC_LAUNCHERS = {
    "mac-app-ppc": b"MOCK-PPC-LAUNCHER",
    "mac-app-i386": b"MOCK-I386-LAUNCHER",
}

PePlan = list[ResourceEntry]


def _align(value: int, alignment: int) -> int:
    return (value + alignment - 1) // alignment * alignment


def build_pe(resources: list[ResourceEntry] | None, machine: int = 0x14C, rsrc_last: bool = True) -> bytes:
    """
    Build a minimal PE32 image with a .text section and an optional .rsrc section.

    Args:
        resources: Resource entries; None builds an image without resources
        machine: COFF machine value
        rsrc_last: Place .rsrc after .text (False puts it first)
    """
    text_raw = b"\xc3" + b"\x00" * (FILE_ALIGNMENT - 1)
    sections: list[tuple[bytes, bytes, int]] = [(b".text", text_raw, 0x60000020)]
    rsrc_raw = b""
    if resources is not None:
        sections.append((b".rsrc", b"", 0x40000040))
        if not rsrc_last:
            sections.reverse()

    opt_size = 224
    headers_size = _align(0x40 + 4 + 20 + opt_size + 40 * len(sections), FILE_ALIGNMENT)

    layout = []
    rva = SECTION_ALIGNMENT
    raw_pointer = headers_size
    for name, raw, characteristics in sections:
        if name == b".rsrc":
            rsrc_raw = build_resource_section(resources or [], rva)
            raw = rsrc_raw
        raw_size = _align(len(raw), FILE_ALIGNMENT)
        layout.append((name, raw, characteristics, rva, raw_pointer, raw_size))
        rva += _align(max(len(raw), 1), SECTION_ALIGNMENT)
        raw_pointer += raw_size

    out = bytearray(headers_size)
    out[0:2] = b"MZ"
    struct.pack_into("<I", out, 0x3C, 0x40)
    out[0x40:0x44] = b"PE\x00\x00"
    struct.pack_into("<HHIIIHH", out, 0x44, machine, len(sections), 0, 0, 0, opt_size, 0x0102)

    opt = 0x44 + 20
    struct.pack_into("<H", out, opt, 0x10B)
    struct.pack_into("<I", out, opt + 16, 0x1000)  # AddressOfEntryPoint
    struct.pack_into("<I", out, opt + 28, 0x400000)  # ImageBase
    struct.pack_into("<II", out, opt + 32, SECTION_ALIGNMENT, FILE_ALIGNMENT)
    struct.pack_into("<I", out, opt + 56, rva)
    struct.pack_into("<I", out, opt + 60, headers_size)
    struct.pack_into("<H", out, opt + 68, 2)  # Subsystem: GUI
    struct.pack_into("<I", out, opt + 92, 16)

    table = opt + opt_size
    for i, (name, raw, characteristics, section_rva, pointer, raw_size) in enumerate(layout):
        struct.pack_into(
            "<8sIIIIIIHHI",
            out,
            table + i * 40,
            name,
            len(raw),
            section_rva,
            raw_size,
            pointer,
            0,
            0,
            0,
            0,
            characteristics,
        )
        if name == b".rsrc":
            struct.pack_into("<II", out, opt + 96 + 2 * 8, section_rva, len(rsrc_raw))

    for _name, raw, _characteristics, _rva, _pointer, raw_size in layout:
        out += raw + b"\x00" * (raw_size - len(raw))
    return bytes(out)


def version_resource(strings: Mapping[str, str], file_version: str = "1.0.0.0") -> bytes:
    """Serialize a VS_VERSIONINFO with one en-US Unicode string table."""
    table = VersionNode(key=f"{LANG_EN_US:04X}{CODEPAGE_UNICODE:04X}", text=True)
    for key, value in {"FileVersion": file_version, **strings}.items():
        node = VersionNode(key=key)
        node.string = value
        table.children.append(node)
    root = VersionNode(
        key="VS_VERSION_INFO",
        value=FixedFileInfo(file_version_ms=0x00010000).to_bytes(),
        children=[
            VersionNode(key="StringFileInfo", text=True, children=[table]),
            VersionNode(
                key="VarFileInfo",
                text=True,
                children=[
                    VersionNode(key="Translation", value=struct.pack("<HH", LANG_EN_US, CODEPAGE_UNICODE)),
                ],
            ),
        ],
    )
    return root.to_bytes()


def icon_resources(group_id: int = 1, icon_ids: tuple[int, ...] = (1,), lang: int = LANG_EN_US) -> list[ResourceEntry]:
    """An icon group with 16x16 images under the given RT_ICON ids."""
    members = []
    entries = []
    for icon_id in icon_ids:
        image = bytes([icon_id]) * 40
        members.append(IconGroupMember(16, 16, 0, 1, 32, len(image), icon_id))
        entries.append(ResourceEntry(type=RT_ICON, id=icon_id, lang=lang, data=image))
    group = IconGroup(id=group_id, lang=lang, members=members)
    entries.append(ResourceEntry(type=RT_GROUP_ICON, id=group_id, lang=lang, data=group.to_bytes()))
    return entries


def projector_resources() -> list[ResourceEntry]:
    """Resources of a typical projector skeleton: one icon group and version info."""
    return [
        *icon_resources(),
        ResourceEntry(
            type=RT_VERSION,
            id=1,
            lang=LANG_EN_US,
            data=version_resource({"ProductName": "Director Projector", "CompanyName": "Macromedia"}),
        ),
    ]


def build_ico(sizes: tuple[int, ...] = (32, 48)) -> bytes:
    """Build an .ico file with one image per size."""
    images = [bytes([size]) * (size * 2) for size in sizes]
    header = struct.pack("<HHH", 0, 1, len(images))
    offset = 6 + 16 * len(images)
    entries = b""
    for size, image in zip(sizes, images, strict=True):
        entries += struct.pack("<BBBBHHII", size, size, 0, 0, 1, 32, len(image), offset)
        offset += len(image)
    return header + entries + b"".join(images)


def build_macho_thin(cpu_type: int, cpu_subtype: int = 0) -> bytes:
    return struct.pack(">III", MH_MAGIC, cpu_type, cpu_subtype) + b"\x00" * 20


def build_macho_fat(types: list[tuple[int, int]]) -> bytes:
    out = bytearray(struct.pack(">II", FAT_MAGIC, len(types)))
    for cpu_type, cpu_subtype in types:
        out += struct.pack(">IIIII", cpu_type, cpu_subtype, 0, 0, 12)
    return bytes(out)


def write_tree(root: Path, files: Mapping[str, bytes]) -> Path:
    for relative, data in files.items():
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
    return root


@pytest.fixture(autouse=True)
def reset_foundation_logging() -> Iterator[None]:
    """Reset foundation logging state before each test to avoid conflicts."""
    reset_foundation_setup_for_testing()
    yield
    reset_foundation_setup_for_testing()


@pytest.fixture(autouse=True)
def mock_launcher_loading(monkeypatch: pytest.MonkeyPatch) -> None:
    """Serve launcher stubs from memory; real stubs are not shipped with the sources."""
    windows_stub = build_pe([])

    def mock_load_launcher(launcher_id: str) -> bytes:
        if launcher_id == "windows-i686":
            return windows_stub
        return MOCK_MAC_LAUNCHERS[launcher_id]

    # Patch where the function is used, not just where it's defined
    monkeypatch.setattr("dirprojector.launchers.windows.load_launcher_binary", mock_load_launcher)
    monkeypatch.setattr("dirprojector.macho.launcher.load_launcher_binary", mock_load_launcher)


@pytest.fixture
def temp_dir() -> Iterator[Path]:
    """Create a temporary directory that is removed after the test."""
    temp_path = Path(tempfile.mkdtemp())
    yield temp_path
    shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def windows_skeleton(temp_dir: Path) -> Callable[..., Path]:
    """
    Factory for unpacked Windows skeleton directories.

    The default tree holds the projector SKL, one DLL, a stray file outside
    the known entries, and two Xtras.
    """

    def make(with_3d_asset: bool = True, extra: Mapping[str, bytes] | None = None) -> Path:
        root = temp_dir / "skeleton-windows"
        files = {
            "Projec32.skl": build_pe(projector_resources()),
            "Proj.dll": b"DLL",
            "ReadMe.txt": b"not part of the projector",
            "xtras/NetLingo.x32": b"NETLINGO",
            "xtras/Net Support/INetURL.x32": b"INETURL",
        }
        if with_3d_asset:
            files["xtras/Media Support/Shockwave 3D Asset.x32"] = b"\x90" * 16 + SHOCKWAVE_3D_SITE + b"\x90" * 16
        files.update(extra or {})
        return write_tree(root, files)

    return make


@pytest.fixture
def mac_skeleton(temp_dir: Path) -> Callable[..., Path]:
    """Factory for unpacked Mac skeleton directories."""

    def make(intel: bool = False, with_pkg_info: bool = True, binary: bytes | None = None) -> Path:
        root = temp_dir / "skeleton-mac"
        resources = "Projector Intel Resources" if intel else "Projector Resources"
        info_plist = plistlib.dumps(
            {
                "CFBundleExecutable": "Projector",
                "CFBundleIconFile": "projector.icns",
                "CFBundleName": "Projector",
                "CFBundlePackageType": "APPL",
            }
        )
        files = {
            f"{resources}/Contents/Info.plist": info_plist,
            f"{resources}/Contents/MacOS/Projector": binary or build_macho_thin(7, 3),
            f"{resources}/Contents/Resources/projector.icns": b"icns-original",
            f"{resources}/Contents/Resources/Projector.rsrc": b"rsrc",
            f"{resources}/Contents/Frameworks/ProjLib.framework/ProjLib": b"PROJLIB",
            "xtras/NetLingo.xtra/Contents/MacOS/NetLingo": b"NETLINGO",
            "xtras/Scripting/FileIO.xtra": b"FILEIO",
        }
        if with_pkg_info:
            files[f"{resources}/Contents/PkgInfo"] = b"APPL????"
        return write_tree(root, files)

    return make


# 🌶️📦🔚
