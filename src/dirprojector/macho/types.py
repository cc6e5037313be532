#
# SPDX-FileCopyrightText: Copyright (c) 2025 provide.io llc. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
#

"""Mach-O and FAT header type detection."""

from __future__ import annotations

from pathlib import Path
import struct

from attrs import define
from provide.foundation import logger

from dirprojector.exceptions import MalformedExecutableError, UnknownHeaderMagicError

FAT_MAGIC = 0xCAFEBABE
MH_MAGIC = 0xFEEDFACE
MH_CIGAM = 0xCEFAEDFE
MH_MAGIC_64 = 0xFEEDFACF
MH_CIGAM_64 = 0xCFFAEDFE

CPU_TYPE_I386 = 0x00000007
CPU_TYPE_POWERPC = 0x00000012

FAT_ARCH_SIZE = 20
FAT_HEADER_SIZE = 8
MACH_HEADER_TYPES_END = 12


@define(frozen=True)
class MachoType:
    """A (cputype, cpusubtype) pair."""

    cpu_type: int
    cpu_subtype: int


def macho_types_data(data: bytes) -> MachoType | list[MachoType]:
    """
    Read the architecture types of a Mach-O binary.

    Args:
        data: At least the header bytes of the binary

    Returns:
        A single type for a thin binary, a list in header order for FAT

    Raises:
        UnknownHeaderMagicError: If the magic is not Mach-O or FAT
        MalformedExecutableError: If the header is cut short
    """
    if len(data) < 4:
        raise UnknownHeaderMagicError(int.from_bytes(data.ljust(4, b"\x00"), "big"))
    (magic,) = struct.unpack_from(">I", data, 0)

    if magic == FAT_MAGIC:
        if len(data) < FAT_HEADER_SIZE:
            raise MalformedExecutableError("Truncated FAT header")
        (count,) = struct.unpack_from(">I", data, 4)
        if len(data) < FAT_HEADER_SIZE + count * FAT_ARCH_SIZE:
            raise MalformedExecutableError(f"Truncated FAT arch table: {count} entries declared")
        types = [MachoType(*struct.unpack_from(">II", data, FAT_HEADER_SIZE + i * FAT_ARCH_SIZE)) for i in range(count)]
        logger.trace("Read FAT types", count=count)
        return types
    if magic in (MH_MAGIC, MH_MAGIC_64, MH_CIGAM, MH_CIGAM_64) and len(data) < MACH_HEADER_TYPES_END:
        raise MalformedExecutableError("Truncated Mach-O header")
    if magic in (MH_MAGIC, MH_MAGIC_64):
        return MachoType(*struct.unpack_from(">II", data, 4))
    if magic in (MH_CIGAM, MH_CIGAM_64):
        return MachoType(*struct.unpack_from("<II", data, 4))
    raise UnknownHeaderMagicError(magic)


def macho_types_file(path: Path) -> MachoType | list[MachoType]:
    """Read the architecture types of a Mach-O file, reading only its headers."""
    with path.open("rb") as f:
        head = f.read(8)
        if len(head) == 8 and struct.unpack_from(">I", head, 0)[0] == FAT_MAGIC:
            (count,) = struct.unpack_from(">I", head, 4)
            head += f.read(count * FAT_ARCH_SIZE)
        else:
            head += f.read(4)
    return macho_types_data(head)


# 🌶️📦🔚
