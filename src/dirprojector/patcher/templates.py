#
# SPDX-FileCopyrightText: Copyright (c) 2025 provide.io llc. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
#

"""Byte-pattern templates with wildcard bytes.

Templates are written as annotated hex strings where ``--`` marks a wildcard
byte, e.g. ``"FF 15 -- -- -- -- BE 04 01 00 00"``.
"""

from __future__ import annotations

import re

from attrs import define, field

from dirprojector.exceptions import ConfigurationError

_HEX_PAIR = re.compile(r"[0-9A-Fa-f]{2}")


def hex_template(text: str) -> tuple[int | None, ...]:
    """
    Parse an annotated hex string into template bytes.

    Args:
        text: Hex pairs separated by whitespace, ``--`` for wildcards

    Returns:
        Tuple of byte values, None for wildcard positions
    """
    compact = re.sub(r"\s+", "", text)
    if len(compact) % 2:
        raise ConfigurationError(f"Odd number of hex digits in template: {text!r}")
    pairs = [compact[i : i + 2] for i in range(0, len(compact), 2)]
    return tuple(int(p, 16) if _HEX_PAIR.fullmatch(p) else None for p in pairs)


def _check_lengths(instance: PatchTemplate, attribute: object, value: tuple[int | None, ...]) -> None:
    if len(value) != len(instance.find):
        raise ConfigurationError(
            f"Patch template size mismatch: find={len(instance.find)} replace={len(value)}"
        )


@define(frozen=True)
class PatchTemplate:
    """Equal-length find and replace byte sequences; None is a wildcard."""

    find: tuple[int | None, ...]
    replace: tuple[int | None, ...] = field(validator=_check_lengths)

    @classmethod
    def from_hex(cls, find: str, replace: str) -> PatchTemplate:
        return cls(hex_template(find), hex_template(replace))

    def pattern(self) -> re.Pattern[bytes]:
        """Compile the find sequence into an overlapping-match regex."""
        body = b"".join(b"." if b is None else re.escape(bytes([b])) for b in self.find)
        return re.compile(b"(?=" + body + b")", re.DOTALL)


SHOCKWAVE_3D_DISPLAY_DRIVERS_SIZE_NAME = "Windows Shockwave 3D InstalledDisplayDrivers Size"

# Enlarge the registry read buffers: 0x10000 for ASCII, 0x20000 for WCHAR.
SHOCKWAVE_3D_DISPLAY_DRIVERS_SIZE_TEMPLATES: tuple[PatchTemplate, ...] = (
    # director-8.5.0 to director-11.0.0-hotfix-1
    PatchTemplate.from_hex(
        "FF 15 -- -- -- -- BE 04 01 00 00 56 E8 -- -- -- --",
        "FF 15 -- -- -- -- BE 00 00 01 00 56 E8 -- -- -- --",
    ),
    # director-11.0.0-hotfix-3 to director-11.5.0
    PatchTemplate.from_hex(
        "FF 15 -- -- -- -- BF 04 01 00 00 57 E8 -- -- -- --",
        "FF 15 -- -- -- -- BF 00 00 01 00 57 E8 -- -- -- --",
    ),
    # director-11.5.8 to director-11.5.9
    PatchTemplate.from_hex(
        "68 -- -- -- -- 57 FF D6 68 08 02 00 00 E8 -- -- -- --",
        "68 -- -- -- -- 57 FF D6 68 00 00 02 00 E8 -- -- -- --",
    ),
    # director-12.0.0
    PatchTemplate.from_hex(
        "68 -- -- -- -- 53 FF D7 68 08 02 00 00 E8 -- -- -- --",
        "68 -- -- -- -- 53 FF D7 68 00 00 02 00 E8 -- -- -- --",
    ),
)

# 🌶️📦🔚
