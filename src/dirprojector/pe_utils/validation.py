#
# SPDX-FileCopyrightText: Copyright (c) 2025 provide.io llc. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
#

"""PE executable validation utilities.

Provides functions to validate Windows PE (Portable Executable) files and to
read the COFF machine type used to pick a launcher stub.
"""

import struct

from provide.foundation import logger

from dirprojector.exceptions import MalformedExecutableError

IMAGE_FILE_MACHINE_I386 = 0x14C
IMAGE_FILE_MACHINE_AMD64 = 0x8664


def is_pe_executable(data: bytes) -> bool:
    """
    Check if data starts with a DOS header.

    Args:
        data: Binary data to check

    Returns:
        True if data starts with "MZ" signature
    """
    return len(data) >= 2 and data[0:2] == b"MZ"


def get_pe_header_offset(data: bytes) -> int | None:
    """
    Read the PE header offset from the DOS header.

    The offset is stored at position 0x3C (e_lfanew field) as a 4-byte
    little-endian integer.

    Args:
        data: PE executable data

    Returns:
        PE header offset, or None if invalid
    """
    if len(data) < 0x40:
        return None

    pe_offset: int = struct.unpack("<I", data[0x3C:0x40])[0]

    if len(data) < pe_offset + 4:
        return None

    pe_signature = data[pe_offset : pe_offset + 4]
    if pe_signature != b"PE\x00\x00":
        logger.warning(
            "Invalid PE signature",
            expected="PE\\x00\\x00",
            actual=pe_signature.hex(),
            offset=f"0x{pe_offset:x}",
        )
        return None

    return pe_offset


def require_pe_header_offset(data: bytes) -> int:
    """Like get_pe_header_offset but raises MalformedExecutableError."""
    if not is_pe_executable(data):
        raise MalformedExecutableError("Missing DOS header signature")
    pe_offset = get_pe_header_offset(data)
    if pe_offset is None:
        raise MalformedExecutableError("Invalid PE header")
    return pe_offset


def get_machine_type(header: bytes) -> int:
    """
    Read the COFF machine field.

    Only the leading bytes are needed: 4 bytes at offset 60 give the COFF
    header offset, then 2 bytes at that offset plus 4 give the machine.

    Args:
        header: Leading bytes of a PE file

    Returns:
        The IMAGE_FILE_MACHINE_* value
    """
    if len(header) < 0x40:
        raise MalformedExecutableError("File too small for a DOS header")
    pe_offset: int = struct.unpack("<I", header[60:64])[0]
    if len(header) < pe_offset + 6:
        raise MalformedExecutableError(f"COFF header out of range: 0x{pe_offset:x}")
    machine: int = struct.unpack("<H", header[pe_offset + 4 : pe_offset + 6])[0]
    logger.trace("Read COFF machine", pe_offset=f"0x{pe_offset:x}", machine=f"0x{machine:x}")
    return machine
