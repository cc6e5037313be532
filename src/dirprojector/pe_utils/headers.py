#
# SPDX-FileCopyrightText: Copyright (c) 2025 provide.io llc. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
#

"""PE header utilities.

Parses the COFF header, optional header and section table into offsets that
the rest of the editor patches with struct.pack_into.
"""

import struct

from attrs import define
from provide.foundation import logger

from dirprojector.exceptions import MalformedExecutableError

from .validation import require_pe_header_offset

PE32_MAGIC = 0x10B
PE32_PLUS_MAGIC = 0x20B

# Optional header field offsets (shared by PE32 and PE32+)
OPT_SIZE_OF_CODE = 4
OPT_SIZE_OF_INITIALIZED_DATA = 8
OPT_SIZE_OF_UNINITIALIZED_DATA = 12
OPT_SECTION_ALIGNMENT = 32
OPT_FILE_ALIGNMENT = 36
OPT_SIZE_OF_IMAGE = 56
OPT_SIZE_OF_HEADERS = 60
OPT_CHECKSUM = 64

IMAGE_DIRECTORY_ENTRY_RESOURCE = 2
IMAGE_DIRECTORY_ENTRY_SECURITY = 4

IMAGE_SCN_CNT_CODE = 0x20
IMAGE_SCN_CNT_INITIALIZED_DATA = 0x40
IMAGE_SCN_CNT_UNINITIALIZED_DATA = 0x80

SECTION_HEADER_SIZE = 40


def align_up(value: int, alignment: int) -> int:
    """Round value up to a multiple of alignment."""
    if alignment <= 1:
        return value
    return (value + alignment - 1) // alignment * alignment


@define
class SectionHeader:
    """One entry of the section table, with the file offset of the header itself."""

    index: int
    header_offset: int
    name: str
    virtual_size: int
    virtual_address: int
    raw_size: int
    raw_pointer: int
    characteristics: int

    def contains_rva(self, rva: int) -> bool:
        size = max(self.virtual_size, self.raw_size)
        return self.virtual_address <= rva < self.virtual_address + size


@define
class PELayout:
    """Header offsets of a parsed PE image."""

    pe_offset: int
    coff_offset: int
    opt_offset: int
    is_pe32_plus: bool
    data_dir_offset: int
    num_data_dirs: int
    section_alignment: int
    file_alignment: int
    sections: list[SectionHeader]

    @property
    def checksum_offset(self) -> int:
        return self.opt_offset + OPT_CHECKSUM

    def section_for_rva(self, rva: int) -> SectionHeader | None:
        for section in self.sections:
            if section.contains_rva(rva):
                return section
        return None


def parse_pe_layout(data: bytes) -> PELayout:
    """
    Parse header offsets and the section table.

    Args:
        data: PE executable data

    Returns:
        Parsed layout

    Raises:
        MalformedExecutableError: If any header lies outside the data
    """
    pe_offset = require_pe_header_offset(data)
    coff_offset = pe_offset + 4
    if len(data) < coff_offset + 20:
        raise MalformedExecutableError("Truncated COFF header")

    num_sections: int = struct.unpack("<H", data[coff_offset + 2 : coff_offset + 4])[0]
    opt_hdr_size: int = struct.unpack("<H", data[coff_offset + 16 : coff_offset + 18])[0]
    opt_offset = coff_offset + 20
    if len(data) < opt_offset + opt_hdr_size or opt_hdr_size < 96:
        raise MalformedExecutableError(f"Truncated optional header: size={opt_hdr_size}")

    magic: int = struct.unpack("<H", data[opt_offset : opt_offset + 2])[0]
    if magic not in (PE32_MAGIC, PE32_PLUS_MAGIC):
        raise MalformedExecutableError(f"Unknown optional header magic: 0x{magic:x}")
    is_pe32_plus = magic == PE32_PLUS_MAGIC

    # PE32: NumberOfRvaAndSizes at +92, directories at +96; PE32+ adds 16
    count_offset = opt_offset + (108 if is_pe32_plus else 92)
    num_data_dirs: int = struct.unpack("<I", data[count_offset : count_offset + 4])[0]
    data_dir_offset = count_offset + 4

    section_alignment: int = struct.unpack_from("<I", data, opt_offset + OPT_SECTION_ALIGNMENT)[0]
    file_alignment: int = struct.unpack_from("<I", data, opt_offset + OPT_FILE_ALIGNMENT)[0]

    section_table_offset = opt_offset + opt_hdr_size
    if len(data) < section_table_offset + num_sections * SECTION_HEADER_SIZE:
        raise MalformedExecutableError("Truncated section table")

    sections = []
    for i in range(num_sections):
        offset = section_table_offset + i * SECTION_HEADER_SIZE
        raw_name, vsize, vaddr, rsize, rptr = struct.unpack_from("<8sIIII", data, offset)
        characteristics: int = struct.unpack_from("<I", data, offset + 36)[0]
        sections.append(
            SectionHeader(
                index=i,
                header_offset=offset,
                name=raw_name.rstrip(b"\x00").decode("latin-1"),
                virtual_size=vsize,
                virtual_address=vaddr,
                raw_size=rsize,
                raw_pointer=rptr,
                characteristics=characteristics,
            )
        )

    logger.trace(
        "Parsed PE layout",
        pe_offset=f"0x{pe_offset:x}",
        pe32_plus=is_pe32_plus,
        sections=[s.name for s in sections],
    )
    return PELayout(
        pe_offset=pe_offset,
        coff_offset=coff_offset,
        opt_offset=opt_offset,
        is_pe32_plus=is_pe32_plus,
        data_dir_offset=data_dir_offset,
        num_data_dirs=num_data_dirs,
        section_alignment=section_alignment,
        file_alignment=file_alignment,
        sections=sections,
    )


def get_data_directory(data: bytes, layout: PELayout, index: int) -> tuple[int, int]:
    """Read (address, size) of a data directory entry, (0, 0) if absent."""
    if index >= layout.num_data_dirs:
        return 0, 0
    address, size = struct.unpack_from("<II", data, layout.data_dir_offset + index * 8)
    return address, size


def set_data_directory(data: bytearray, layout: PELayout, index: int, address: int, size: int) -> None:
    """Write (address, size) into a data directory entry."""
    if index >= layout.num_data_dirs:
        raise MalformedExecutableError(f"Data directory {index} not present")
    struct.pack_into("<II", data, layout.data_dir_offset + index * 8, address, size)


def update_size_fields(data: bytearray, layout: PELayout) -> None:
    """
    Recompute SizeOfImage and the code/data size totals from the section table.

    Code and initialized data sum raw sizes, uninitialized data sums virtual
    sizes, each selected by section characteristic flags.

    Args:
        data: PE executable data (modified in-place)
        layout: Layout whose sections reflect the current headers
    """
    size_of_code = 0
    size_of_init = 0
    size_of_uninit = 0
    image_end = 0
    for section in layout.sections:
        if section.characteristics & IMAGE_SCN_CNT_CODE:
            size_of_code += section.raw_size
        if section.characteristics & IMAGE_SCN_CNT_INITIALIZED_DATA:
            size_of_init += section.raw_size
        if section.characteristics & IMAGE_SCN_CNT_UNINITIALIZED_DATA:
            size_of_uninit += align_up(section.virtual_size, layout.file_alignment)
        image_end = max(image_end, section.virtual_address + max(section.virtual_size, section.raw_size))

    size_of_image = align_up(image_end, layout.section_alignment)
    struct.pack_into("<I", data, layout.opt_offset + OPT_SIZE_OF_CODE, size_of_code)
    struct.pack_into("<I", data, layout.opt_offset + OPT_SIZE_OF_INITIALIZED_DATA, size_of_init)
    struct.pack_into("<I", data, layout.opt_offset + OPT_SIZE_OF_UNINITIALIZED_DATA, size_of_uninit)
    struct.pack_into("<I", data, layout.opt_offset + OPT_SIZE_OF_IMAGE, size_of_image)

    logger.debug(
        "Updated PE size fields",
        size_of_code=f"0x{size_of_code:x}",
        size_of_initialized_data=f"0x{size_of_init:x}",
        size_of_uninitialized_data=f"0x{size_of_uninit:x}",
        size_of_image=f"0x{size_of_image:x}",
    )
