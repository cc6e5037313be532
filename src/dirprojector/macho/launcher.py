#
# SPDX-FileCopyrightText: Copyright (c) 2025 provide.io llc. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
#

"""Mac app launcher synthesis from thin launcher stubs."""

from __future__ import annotations

from collections.abc import Sequence
import struct

from provide.foundation import logger

from dirprojector.exceptions import UnknownCpuTypeError
from dirprojector.launchers.loader import load_launcher_binary
from dirprojector.macho.types import CPU_TYPE_I386, CPU_TYPE_POWERPC, FAT_ARCH_SIZE, FAT_MAGIC, MachoType

# lipo always uses 2^12 for ppc, ppc64, i386 and x86_64
FAT_ALIGN = 12
FAT_ALIGN_SIZE = 1 << FAT_ALIGN

THIN_LAUNCHERS = {
    CPU_TYPE_POWERPC: "mac-app-ppc",
    CPU_TYPE_I386: "mac-app-i386",
}


def macho_app_launcher_thin(macho_type: MachoType) -> bytes:
    """
    Load the thin launcher for one architecture.

    Raises:
        UnknownCpuTypeError: For CPU types without a launcher
    """
    try:
        launcher_id = THIN_LAUNCHERS[macho_type.cpu_type]
    except KeyError:
        raise UnknownCpuTypeError(macho_type.cpu_type) from None
    return load_launcher_binary(launcher_id)


def macho_app_launcher_fat(types: Sequence[MachoType]) -> bytes:
    """
    Build a FAT launcher holding one thin launcher per type.

    Arch records are written first with placeholder offsets; each body is
    padded to the alignment boundary and its record back-patched once its
    position is known.

    Args:
        types: Architectures, in the order they should appear

    Returns:
        FAT binary bytes
    """
    bodies = [macho_app_launcher_thin(t) for t in types]

    out = bytearray(struct.pack(">II", FAT_MAGIC, len(types)))
    records = []
    for macho_type in types:
        records.append(len(out))
        out += struct.pack(">IIIII", macho_type.cpu_type, macho_type.cpu_subtype, 0, 0, FAT_ALIGN)

    for record, body in zip(records, bodies, strict=True):
        over = len(out) % FAT_ALIGN_SIZE
        if over:
            out += b"\x00" * (FAT_ALIGN_SIZE - over)
        struct.pack_into(">II", out, record + 8, len(out), len(body))
        out += body

    logger.debug(
        "Built FAT launcher",
        archs=[f"0x{t.cpu_type:x}" for t in types],
        size=len(out),
        header_size=8 + FAT_ARCH_SIZE * len(types),
    )
    return bytes(out)


def macho_app_launcher(types: MachoType | Sequence[MachoType]) -> bytes:
    """Build a thin or FAT launcher matching the given type(s)."""
    if isinstance(types, MachoType):
        return macho_app_launcher_thin(types)
    return macho_app_launcher_fat(types)


# 🌶️📦🔚
