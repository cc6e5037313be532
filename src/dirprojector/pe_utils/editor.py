#
# SPDX-FileCopyrightText: Copyright (c) 2025 provide.io llc. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
#

"""PE resource replacement.

Rewrites the resource section of an executable in place. Only a resource
section that is the last section of the image can grow or shrink, since
nothing after it has to move.
"""

from collections.abc import Mapping
import struct

from provide.foundation import logger

from dirprojector.exceptions import MalformedExecutableError, NonFinalResourceSectionError

from .headers import (
    IMAGE_DIRECTORY_ENTRY_RESOURCE,
    PELayout,
    SectionHeader,
    align_up,
    get_data_directory,
    parse_pe_layout,
    set_data_directory,
    update_size_fields,
)
from .icons import IconFile, icon_groups, replace_icons_for_group
from .resources import (
    RT_GROUP_ICON,
    RT_ICON,
    RT_VERSION,
    ResourceEntry,
    ResourceKey,
    build_resource_section,
    parse_resource_section,
)
from .signature import signature_get, signature_set, signature_strip, update_checksum
from .version import VersionInfo, pe_version_ints


def find_resource_section(data: bytes, layout: PELayout) -> SectionHeader:
    """
    Locate the section holding the resource directory.

    Raises:
        MalformedExecutableError: If the image has no resources
        NonFinalResourceSectionError: If another section follows it
    """
    rva, size = get_data_directory(data, layout, IMAGE_DIRECTORY_ENTRY_RESOURCE)
    if not rva or not size:
        raise MalformedExecutableError("Resource section absent")
    section = layout.section_for_rva(rva)
    if section is None:
        raise MalformedExecutableError(f"Resource directory outside all sections: rva=0x{rva:x}")
    if section.virtual_address != rva:
        raise MalformedExecutableError(f"Resource directory does not start its section: {section.name}")
    last_va = max(s.virtual_address for s in layout.sections)
    last_raw = max(s.raw_pointer for s in layout.sections)
    if section.index != len(layout.sections) - 1 or section.virtual_address != last_va or section.raw_pointer != last_raw:
        raise NonFinalResourceSectionError(section.name)
    return section


def read_resources(data: bytes) -> list[ResourceEntry]:
    """Parse all resource entries of an executable."""
    layout = parse_pe_layout(data)
    section = find_resource_section(data, layout)
    raw = data[section.raw_pointer : section.raw_pointer + section.raw_size]
    return parse_resource_section(raw, section.virtual_address)


def replace_resource_section(data: bytes, entries: list[ResourceEntry]) -> bytes:
    """
    Serialize entries into the resource section and fix every dependent header.

    Updates the section's raw and virtual sizes, the resource data directory,
    SizeOfImage, the code/data size totals and the checksum. Any overlay data
    after the section is kept after the new section.

    Args:
        data: Unsigned PE executable data
        entries: Complete set of resources to store

    Returns:
        The rewritten executable
    """
    layout = parse_pe_layout(data)
    section = find_resource_section(data, layout)

    raw = build_resource_section(entries, section.virtual_address)
    raw_size = align_up(len(raw), layout.file_alignment)
    old_end = section.raw_pointer + section.raw_size
    overlay = data[old_end:]

    out = bytearray(data[: section.raw_pointer])
    out += raw
    out += b"\x00" * (raw_size - len(raw))
    out += overlay

    struct.pack_into("<I", out, section.header_offset + 8, len(raw))
    struct.pack_into("<I", out, section.header_offset + 16, raw_size)
    set_data_directory(out, layout, IMAGE_DIRECTORY_ENTRY_RESOURCE, section.virtual_address, len(raw))

    section.virtual_size = len(raw)
    section.raw_size = raw_size
    update_size_fields(out, layout)
    update_checksum(out)

    logger.debug(
        "Replaced resource section",
        section=section.name,
        old_size=f"0x{old_end - section.raw_pointer:x}",
        new_size=f"0x{raw_size:x}",
        overlay=len(overlay),
    )
    return bytes(out)


def apply_version_strings(entries: list[ResourceEntry], version_strings: Mapping[str, str]) -> None:
    """
    Set version strings for every language of every version resource.

    FileVersion and ProductVersion also update the numeric fixed-info fields
    when they parse as up to four 16-bit integers.
    """
    values = dict(version_strings)
    for info in VersionInfo.from_entries(entries):
        for lang, codepage in info.languages():
            info.set_string_values(lang, codepage, values)

        file_version = values.get("FileVersion")
        if file_version:
            ints = pe_version_ints(file_version)
            if ints:
                info.fixed.file_version_ms, info.fixed.file_version_ls = ints
        product_version = values.get("ProductVersion")
        if product_version:
            ints = pe_version_ints(product_version)
            if ints:
                info.fixed.product_version_ms, info.fixed.product_version_ls = ints

        info.output_to_entries(entries)


def apply_icon(entries: list[ResourceEntry], icon_data: bytes) -> None:
    """Replace the icons of every icon group in every language."""
    icon = IconFile.from_bytes(icon_data)
    for group in icon_groups(entries):
        replace_icons_for_group(entries, group.id, group.lang, icon.images)


def pe_resource_replace(
    data: bytes,
    icon_data: bytes | None = None,
    version_strings: Mapping[str, str] | None = None,
    remove_signature: bool = False,
) -> bytes:
    """
    Replace icons and version strings of an executable.

    Any signature is stripped before editing and, unless remove_signature is
    set, reattached afterwards byte-for-byte. The reattached signature no
    longer validates; tools that only check for its presence still see one.

    Args:
        data: PE executable data
        icon_data: Contents of an .ico file
        version_strings: StringFileInfo values to set
        remove_signature: Drop the signature instead of reattaching it

    Returns:
        The modified executable; the input itself when there is nothing to do
    """
    if not icon_data and not version_strings and not remove_signature:
        logger.trace("No resource changes requested")
        return data

    signature = None if remove_signature else signature_get(data)
    unsigned = signature_strip(data)

    entries = read_resources(unsigned)
    if icon_data:
        apply_icon(entries, icon_data)
    if version_strings:
        apply_version_strings(entries, version_strings)

    result = replace_resource_section(unsigned, entries)
    if signature:
        result = signature_set(result, signature)

    logger.debug(
        "Replaced PE resources",
        icon=bool(icon_data),
        version_strings=sorted(version_strings) if version_strings else [],
        signature="removed" if remove_signature else ("kept" if signature else "none"),
    )
    return result


def select_launcher_resources(entries: list[ResourceEntry]) -> list[ResourceEntry]:
    """
    Pick the resources a launcher should carry from its projector.

    Keeps every version resource, the lowest-id icon group of each language,
    and the icons that group references.
    """
    first_groups: dict[int, ResourceKey] = {}
    members: dict[tuple[int, ResourceKey], set[int]] = {}
    for group in icon_groups(entries):
        members[(group.lang, group.id)] = {m.icon_id for m in group.members}
        known = first_groups.get(group.lang)
        if known is None or _id_order(group.id) < _id_order(known):
            first_groups[group.lang] = group.id

    group_ids = set(first_groups.values())
    icon_ids: set[int] = set()
    for lang, group_id in first_groups.items():
        icon_ids |= members[(lang, group_id)]

    return [
        e
        for e in entries
        if e.type == RT_VERSION
        or (e.type == RT_ICON and e.id in icon_ids)
        or (e.type == RT_GROUP_ICON and e.id in group_ids)
    ]


def _id_order(key: ResourceKey) -> tuple[int, int | str]:
    return (0, key) if isinstance(key, int) else (1, key)


def copy_resources(target: bytes, source: bytes) -> bytes:
    """
    Replace the resources of target with launcher resources picked from source.

    Args:
        target: Executable receiving the resources (for example a launcher stub)
        source: Executable providing them; its signature is ignored

    Returns:
        The modified target, with its own signature reattached if it had one
    """
    signature = signature_get(target)
    unsigned = signature_strip(target)
    entries = select_launcher_resources(read_resources(signature_strip(source)))
    result = replace_resource_section(unsigned, entries)
    if signature:
        result = signature_set(result, signature)
    logger.debug("Copied launcher resources", entries=len(entries))
    return result
