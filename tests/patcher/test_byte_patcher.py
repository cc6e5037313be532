#
# SPDX-FileCopyrightText: Copyright (c) 2025 provide.io llc. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
#

"""Tests for fixed-width byte-pattern patching."""

from __future__ import annotations

from pathlib import Path

import pytest

from dirprojector.exceptions import (
    AmbiguousPatchCandidateError,
    ConfigurationError,
    NoPatchCandidateError,
)
from dirprojector.patcher import (
    SHOCKWAVE_3D_DISPLAY_DRIVERS_SIZE_NAME,
    SHOCKWAVE_3D_DISPLAY_DRIVERS_SIZE_TEMPLATES,
    PatchTemplate,
    find_patch_site,
    hex_template,
    patch_bytes_once,
    patch_file_once,
)

TEMPLATES = (
    PatchTemplate.from_hex("AA -- BB", "AA -- CC"),
    PatchTemplate.from_hex("11 22 -- 33", "11 44 -- 33"),
)


class TestHexTemplate:
    """Test template parsing."""

    def test_wildcards_and_whitespace(self) -> None:
        assert hex_template("FF 15 --\n 0a") == (0xFF, 0x15, None, 0x0A)

    def test_odd_digits_rejected(self) -> None:
        with pytest.raises(ConfigurationError):
            hex_template("FF 1")

    def test_length_mismatch_rejected(self) -> None:
        with pytest.raises(ConfigurationError, match="size mismatch"):
            PatchTemplate.from_hex("AA BB", "AA")


class TestPatchBytesOnce:
    """Test single-site patching."""

    def test_patches_only_non_wildcard_bytes(self) -> None:
        data = b"\x00\x00\x11\x22\x99\x33\x00"
        result = patch_bytes_once(data, TEMPLATES, "test")
        assert result == b"\x00\x00\x11\x44\x99\x33\x00"
        assert len(result) == len(data)

    def test_wildcard_byte_keeps_original(self) -> None:
        result = patch_bytes_once(b"\xaa\x7f\xbb", TEMPLATES, "test")
        assert result == b"\xaa\x7f\xcc"

    def test_no_match_raises(self) -> None:
        with pytest.raises(NoPatchCandidateError, match="No patch candidates found for: test"):
            patch_bytes_once(b"\x00" * 16, TEMPLATES, "test")

    def test_two_offsets_raise(self) -> None:
        with pytest.raises(AmbiguousPatchCandidateError, match="Multiple patch candidates found for: test"):
            patch_bytes_once(b"\xaa\x00\xbb\x00\xaa\x01\xbb", TEMPLATES, "test")

    def test_matches_across_templates_are_combined(self) -> None:
        with pytest.raises(AmbiguousPatchCandidateError):
            patch_bytes_once(b"\xaa\x00\xbb\x11\x22\x00\x33", TEMPLATES, "test")

    def test_overlapping_matches_are_counted(self) -> None:
        templates = (PatchTemplate.from_hex("AA -- AA", "BB -- BB"),)
        with pytest.raises(AmbiguousPatchCandidateError):
            find_patch_site(b"\xaa\xaa\xaa\xaa", templates, "overlap")

    def test_input_not_modified(self) -> None:
        data = bytearray(b"\xaa\x00\xbb")
        patch_bytes_once(bytes(data), TEMPLATES, "test")
        assert data == bytearray(b"\xaa\x00\xbb")


class TestShockwave3dTemplates:
    """Test the built-in Shockwave 3D driver size templates."""

    @pytest.mark.parametrize("template", SHOCKWAVE_3D_DISPLAY_DRIVERS_SIZE_TEMPLATES)
    def test_each_revision_patches(self, template: PatchTemplate) -> None:
        site = bytes(0x5A if b is None else b for b in template.find)
        data = b"\x90" * 8 + site + b"\x90" * 8
        result = patch_bytes_once(data, SHOCKWAVE_3D_DISPLAY_DRIVERS_SIZE_TEMPLATES, SHOCKWAVE_3D_DISPLAY_DRIVERS_SIZE_NAME)
        expected = bytes(0x5A if b is None else b for b in template.replace)
        assert result == b"\x90" * 8 + expected + b"\x90" * 8

    def test_patch_file_once(self, tmp_path: Path) -> None:
        target = tmp_path / "Shockwave 3D Asset.x32"
        template = SHOCKWAVE_3D_DISPLAY_DRIVERS_SIZE_TEMPLATES[0]
        target.write_bytes(bytes(0 if b is None else b for b in template.find))
        patch_file_once(target, SHOCKWAVE_3D_DISPLAY_DRIVERS_SIZE_TEMPLATES, SHOCKWAVE_3D_DISPLAY_DRIVERS_SIZE_NAME)
        assert target.read_bytes() == bytes(0 if b is None else b for b in template.replace)


# 🌶️📦🔚
