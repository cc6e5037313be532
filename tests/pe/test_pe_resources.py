#
# SPDX-FileCopyrightText: Copyright (c) 2025 provide.io llc. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
#

"""Tests for PE resource replacement."""

from __future__ import annotations

import struct

from conftest import (
    LANG_EN_US,
    build_ico,
    build_pe,
    icon_resources,
    projector_resources,
    version_resource,
)
import pytest

from dirprojector.exceptions import MalformedExecutableError, NonFinalResourceSectionError
from dirprojector.pe_utils import (
    RT_GROUP_ICON,
    RT_ICON,
    RT_VERSION,
    IconFile,
    ResourceEntry,
    VersionInfo,
    copy_resources,
    icon_groups,
    pe_resource_replace,
    pe_version_ints,
    read_resources,
    select_launcher_resources,
)
from dirprojector.pe_utils.headers import parse_pe_layout


def _version(data: bytes) -> VersionInfo:
    infos = VersionInfo.from_entries(read_resources(data))
    assert len(infos) == 1
    return infos[0]


class TestPeVersionInts:
    """Test numeric version parsing."""

    @pytest.mark.parametrize(
        ("version", "expected"),
        [
            ("1.2.3.4", (0x00010002, 0x00030004)),
            ("1,2", (0x00010002, 0)),
            ("65535.0.0.1", (0xFFFF0000, 1)),
            ("65536.0", None),
            ("1.2 beta", None),
            ("", None),
        ],
    )
    def test_parse(self, version: str, expected: tuple[int, int] | None) -> None:
        assert pe_version_ints(version) == expected


class TestReadResources:
    """Test resource section parsing."""

    def test_round_trips_entries(self) -> None:
        entries = read_resources(build_pe(projector_resources()))
        assert sorted((e.type, e.id, e.lang) for e in entries) == [
            (RT_ICON, 1, LANG_EN_US),
            (RT_GROUP_ICON, 1, LANG_EN_US),
            (RT_VERSION, 1, LANG_EN_US),
        ]

    def test_missing_resource_section(self) -> None:
        with pytest.raises(MalformedExecutableError, match="Resource section absent"):
            read_resources(build_pe(None))

    def test_resource_section_must_be_last(self) -> None:
        with pytest.raises(NonFinalResourceSectionError):
            read_resources(build_pe(projector_resources(), rsrc_last=False))

    def test_not_a_pe(self) -> None:
        with pytest.raises(MalformedExecutableError):
            read_resources(b"\x7fELF" + b"\x00" * 128)


class TestPeResourceReplace:
    """Test icon and version string replacement."""

    def test_no_op_returns_input(self) -> None:
        data = build_pe(projector_resources())
        assert pe_resource_replace(data) is data

    def test_version_strings_update_string_and_fixed_info(self) -> None:
        data = build_pe(projector_resources())
        result = pe_resource_replace(
            data,
            version_strings={"FileVersion": "1.2.3.4", "ProductVersion": "5.6", "CompanyName": "Example"},
        )
        info = _version(result)
        strings = info.get_string_values(LANG_EN_US, 0x4B0)
        assert strings["FileVersion"] == "1.2.3.4"
        assert strings["CompanyName"] == "Example"
        assert strings["ProductName"] == "Director Projector"
        assert info.fixed.file_version_ms == 0x00010002
        assert info.fixed.file_version_ls == 0x00030004
        assert info.fixed.product_version_ms == 0x00050006
        assert info.fixed.product_version_ls == 0

    def test_non_numeric_version_keeps_fixed_info(self) -> None:
        result = pe_resource_replace(build_pe(projector_resources()), version_strings={"FileVersion": "beta"})
        info = _version(result)
        assert info.get_string_values(LANG_EN_US, 0x4B0)["FileVersion"] == "beta"
        assert info.fixed.file_version_ms == 0x00010000

    def test_icon_replaces_group_reusing_ids(self) -> None:
        data = build_pe(projector_resources())
        result = pe_resource_replace(data, icon_data=build_ico((32, 48)))
        entries = read_resources(result)
        groups = icon_groups(entries)
        assert len(groups) == 1
        assert [m.icon_id for m in groups[0].members] == [1, 2]
        assert [m.width for m in groups[0].members] == [32, 48]
        icons = {e.id: e.data for e in entries if e.type == RT_ICON}
        assert icons[1] == bytes([32]) * 64
        assert icons[2] == bytes([48]) * 96

    def test_new_icon_ids_skip_ids_used_elsewhere(self) -> None:
        resources = [*icon_resources(group_id=1, icon_ids=(1,)), *icon_resources(group_id=2, icon_ids=(2,))]
        resources = [e for e in resources if not (e.type == RT_GROUP_ICON and e.id == 2)]
        result = pe_resource_replace(build_pe(resources), icon_data=build_ico((16, 32, 48)))
        group = icon_groups(read_resources(result))[0]
        assert [m.icon_id for m in group.members] == [1, 3, 4]

    def test_headers_updated(self) -> None:
        data = build_pe(projector_resources())
        result = pe_resource_replace(data, icon_data=build_ico((128,)))
        layout = parse_pe_layout(result)
        rsrc = layout.sections[-1]
        assert rsrc.raw_pointer + rsrc.raw_size == len(result)
        assert rsrc.raw_size % layout.file_alignment == 0
        (size_of_image,) = struct.unpack_from("<I", result, layout.opt_offset + 56)
        assert size_of_image % layout.section_alignment == 0
        assert size_of_image >= rsrc.virtual_address + rsrc.virtual_size

    def test_size_totals_sum_raw_sizes(self) -> None:
        result = pe_resource_replace(build_pe(projector_resources()), icon_data=build_ico((128,)))
        layout = parse_pe_layout(result)
        text, rsrc = layout.sections
        size_of_code, size_of_init, size_of_uninit = struct.unpack_from("<III", result, layout.opt_offset + 4)
        assert size_of_code == text.raw_size
        assert size_of_init == rsrc.raw_size
        assert size_of_uninit == 0

    def test_invalid_icon(self) -> None:
        with pytest.raises(MalformedExecutableError, match="Not an icon file"):
            pe_resource_replace(build_pe(projector_resources()), icon_data=b"\x00\x00\x02\x00\x00\x00")


class TestLauncherResources:
    """Test selection of resources copied into launchers."""

    def test_first_icon_group_per_language(self) -> None:
        resources = [
            *icon_resources(group_id=5, icon_ids=(5,)),
            *icon_resources(group_id=2, icon_ids=(2, 3)),
            ResourceEntry(type=RT_VERSION, id=1, lang=LANG_EN_US, data=version_resource({})),
            ResourceEntry(type=24, id=1, lang=LANG_EN_US, data=b"<manifest/>"),
        ]
        selected = select_launcher_resources(resources)
        assert sorted((e.type, e.id) for e in selected) == [
            (RT_ICON, 2),
            (RT_ICON, 3),
            (RT_GROUP_ICON, 2),
            (RT_VERSION, 1),
        ]

    def test_copy_resources_into_stub(self) -> None:
        stub = build_pe([])
        result = copy_resources(stub, build_pe(projector_resources()))
        entries = read_resources(result)
        assert {e.type for e in entries} == {RT_ICON, RT_GROUP_ICON, RT_VERSION}


class TestIconFile:
    """Test .ico parsing."""

    def test_parse(self) -> None:
        icon = IconFile.from_bytes(build_ico((16, 32)))
        assert [(i.width, i.bit_count, len(i.data)) for i in icon.images] == [(16, 32, 32), (32, 32, 64)]

    def test_truncated(self) -> None:
        with pytest.raises(MalformedExecutableError):
            IconFile.from_bytes(build_ico((16,))[:20])


# 🌶️📦🔚
