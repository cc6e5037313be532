#
# SPDX-FileCopyrightText: Copyright (c) 2025 provide.io llc. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
#

"""Authenticode signature block handling.

The Certificate Table (data directory entry #4) holds an absolute file offset,
not an RVA, and the signature itself is appended after all section data.
"""

import struct

from provide.foundation import logger

from dirprojector.exceptions import MalformedExecutableError

from .headers import IMAGE_DIRECTORY_ENTRY_SECURITY, align_up, get_data_directory, parse_pe_layout, set_data_directory


def pe_checksum(data: bytes, checksum_offset: int) -> int:
    """
    Compute the PE image checksum.

    Args:
        data: PE executable data
        checksum_offset: File offset of the CheckSum field, which is excluded

    Returns:
        The 32-bit checksum value
    """
    buffer = bytearray(data)
    struct.pack_into("<I", buffer, checksum_offset, 0)
    if len(buffer) % 2:
        buffer.append(0)
    total = sum(struct.unpack(f"<{len(buffer) // 2}H", buffer))
    while total > 0xFFFF:
        total = (total & 0xFFFF) + (total >> 16)
    return (total + len(data)) & 0xFFFFFFFF


def update_checksum(data: bytearray) -> None:
    """Recompute and store the CheckSum field in place."""
    layout = parse_pe_layout(data)
    checksum = pe_checksum(data, layout.checksum_offset)
    struct.pack_into("<I", data, layout.checksum_offset, checksum)
    logger.trace("Updated PE checksum", checksum=f"0x{checksum:08x}")


def signature_get(data: bytes) -> bytes | None:
    """
    Read the raw signature block.

    Args:
        data: PE executable data

    Returns:
        Certificate table bytes, or None when unsigned
    """
    layout = parse_pe_layout(data)
    offset, size = get_data_directory(data, layout, IMAGE_DIRECTORY_ENTRY_SECURITY)
    if not offset or not size:
        return None
    if offset + size > len(data):
        raise MalformedExecutableError(f"Certificate table out of range: 0x{offset:x}+0x{size:x}")
    logger.debug("Found signature", offset=f"0x{offset:x}", size=size)
    return bytes(data[offset : offset + size])


def signature_strip(data: bytes) -> bytes:
    """
    Remove the signature block, clearing its directory entry and fixing the checksum.

    Data appended after the signature is dropped with it.

    Args:
        data: PE executable data

    Returns:
        Unsigned executable data (unchanged if it was not signed)
    """
    layout = parse_pe_layout(data)
    offset, size = get_data_directory(data, layout, IMAGE_DIRECTORY_ENTRY_SECURITY)
    if not offset or not size:
        return bytes(data)

    buffer = bytearray(data[:offset])
    set_data_directory(buffer, layout, IMAGE_DIRECTORY_ENTRY_SECURITY, 0, 0)
    update_checksum(buffer)
    logger.debug("Stripped signature", offset=f"0x{offset:x}", size=size)
    return bytes(buffer)


def signature_set(data: bytes, signature: bytes) -> bytes:
    """
    Append a signature block and point the certificate table at it.

    Args:
        data: Unsigned PE executable data
        signature: Certificate table bytes

    Returns:
        Executable data with the signature attached
    """
    buffer = bytearray(data)
    offset = align_up(len(buffer), 8)
    buffer.extend(b"\x00" * (offset - len(buffer)))
    buffer.extend(signature)
    layout = parse_pe_layout(buffer)
    set_data_directory(buffer, layout, IMAGE_DIRECTORY_ENTRY_SECURITY, offset, len(signature))
    update_checksum(buffer)
    logger.debug("Attached signature", offset=f"0x{offset:x}", size=len(signature))
    return bytes(buffer)
