#
# SPDX-FileCopyrightText: Copyright (c) 2025 provide.io llc. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
#

"""PE resource directory parsing and serialization.

The resource tree has three levels (type, name, language). It is flattened
into ResourceEntry records on read and rebuilt from them on write, with
named entries before numeric ones and each group sorted as Windows expects.
"""

from collections.abc import Iterable
import struct

from attrs import define
from provide.foundation import logger

from dirprojector.exceptions import MalformedExecutableError

from .headers import align_up

RT_ICON = 3
RT_GROUP_ICON = 14
RT_VERSION = 16

RESOURCE_DIRECTORY_SIZE = 16
RESOURCE_DIRECTORY_ENTRY_SIZE = 8
RESOURCE_DATA_ENTRY_SIZE = 16

ResourceKey = int | str


@define
class ResourceEntry:
    """A single leaf of the resource tree."""

    type: ResourceKey
    id: ResourceKey
    lang: int
    data: bytes
    codepage: int = 0


def _sort_key(key: ResourceKey) -> tuple[int, str, int]:
    if isinstance(key, str):
        return (0, key.upper(), 0)
    return (1, "", key)


def _read_name(section: bytes, offset: int) -> str:
    if offset + 2 > len(section):
        raise MalformedExecutableError(f"Resource name out of range: 0x{offset:x}")
    (length,) = struct.unpack_from("<H", section, offset)
    raw = section[offset + 2 : offset + 2 + length * 2]
    return raw.decode("utf-16-le")


def _read_directory(section: bytes, offset: int) -> list[tuple[ResourceKey, bool, int]]:
    """Return (key, is_subdirectory, target offset) for each entry of a directory table."""
    if offset + RESOURCE_DIRECTORY_SIZE > len(section):
        raise MalformedExecutableError(f"Resource directory out of range: 0x{offset:x}")
    named, ids = struct.unpack_from("<HH", section, offset + 12)
    entries = []
    for i in range(named + ids):
        entry_offset = offset + RESOURCE_DIRECTORY_SIZE + i * RESOURCE_DIRECTORY_ENTRY_SIZE
        name, target = struct.unpack_from("<II", section, entry_offset)
        key: ResourceKey = _read_name(section, name & 0x7FFFFFFF) if name & 0x80000000 else name & 0xFFFF
        entries.append((key, bool(target & 0x80000000), target & 0x7FFFFFFF))
    return entries


def parse_resource_section(section: bytes, section_rva: int) -> list[ResourceEntry]:
    """
    Flatten a raw resource section into entries.

    Args:
        section: Resource section bytes, starting at the root directory
        section_rva: RVA of the section, used to locate leaf data

    Returns:
        Entries in tree order

    Raises:
        MalformedExecutableError: If any offset points outside the section
    """
    entries: list[ResourceEntry] = []
    for type_key, type_is_dir, type_target in _read_directory(section, 0):
        if not type_is_dir:
            raise MalformedExecutableError(f"Resource type {type_key!r} is not a directory")
        for name_key, name_is_dir, name_target in _read_directory(section, type_target):
            if not name_is_dir:
                raise MalformedExecutableError(f"Resource {type_key!r}/{name_key!r} is not a directory")
            for lang_key, lang_is_dir, data_entry in _read_directory(section, name_target):
                if lang_is_dir or not isinstance(lang_key, int):
                    raise MalformedExecutableError(f"Unexpected nesting in resource {type_key!r}/{name_key!r}")
                rva, size, codepage, _ = struct.unpack_from("<IIII", section, data_entry)
                start = rva - section_rva
                if start < 0 or start + size > len(section):
                    raise MalformedExecutableError(f"Resource data outside section: rva=0x{rva:x} size={size}")
                entries.append(
                    ResourceEntry(
                        type=type_key,
                        id=name_key,
                        lang=lang_key,
                        data=bytes(section[start : start + size]),
                        codepage=codepage,
                    )
                )
    logger.debug("Parsed resources", count=len(entries))
    return entries


def _tree(entries: list[ResourceEntry]) -> dict[ResourceKey, dict[ResourceKey, dict[int, ResourceEntry]]]:
    tree: dict[ResourceKey, dict[ResourceKey, dict[int, ResourceEntry]]] = {}
    for entry in entries:
        tree.setdefault(entry.type, {}).setdefault(entry.id, {})[entry.lang] = entry
    return tree


def _sorted_keys(keys: Iterable[ResourceKey]) -> list[ResourceKey]:
    return sorted(keys, key=_sort_key)


def build_resource_section(entries: list[ResourceEntry], section_rva: int) -> bytes:
    """
    Serialize entries into a resource section placed at section_rva.

    Layout: all directory tables, then data entries, then name strings, then
    8-byte aligned data blobs.

    Args:
        entries: Resource entries; later duplicates of a type/id/lang win
        section_rva: RVA the section will be mapped at

    Returns:
        Raw section bytes (not padded to file alignment)
    """
    tree = _tree(entries)

    def table_size(count: int) -> int:
        return RESOURCE_DIRECTORY_SIZE + count * RESOURCE_DIRECTORY_ENTRY_SIZE

    # Directory offsets: root, then one table per type, then one per (type, name)
    offset = table_size(len(tree))
    type_offsets: dict[ResourceKey, int] = {}
    for type_key in _sorted_keys(tree):
        type_offsets[type_key] = offset
        offset += table_size(len(tree[type_key]))
    name_offsets: dict[tuple[ResourceKey, ResourceKey], int] = {}
    for type_key in _sorted_keys(tree):
        for name_key in _sorted_keys(tree[type_key]):
            name_offsets[(type_key, name_key)] = offset
            offset += table_size(len(tree[type_key][name_key]))

    leaves: list[ResourceEntry] = []
    data_entry_offsets: dict[int, int] = {}
    for type_key in _sorted_keys(tree):
        for name_key in _sorted_keys(tree[type_key]):
            for lang in sorted(tree[type_key][name_key]):
                entry = tree[type_key][name_key][lang]
                data_entry_offsets[id(entry)] = offset
                leaves.append(entry)
                offset += RESOURCE_DATA_ENTRY_SIZE

    string_offsets: dict[str, int] = {}
    for entry in leaves:
        for key in (entry.type, entry.id):
            if isinstance(key, str) and key not in string_offsets:
                string_offsets[key] = offset
                offset += 2 + len(key.encode("utf-16-le"))

    blob_offsets: dict[int, int] = {}
    for entry in leaves:
        offset = align_up(offset, 8)
        blob_offsets[id(entry)] = offset
        offset += len(entry.data)

    out = bytearray(offset)

    def write_table(at: int, keys: list[ResourceKey], targets: list[int], subdirs: bool) -> None:
        named = sum(1 for k in keys if isinstance(k, str))
        struct.pack_into("<IIHHHH", out, at, 0, 0, 0, 0, named, len(keys) - named)
        for i, (key, target) in enumerate(zip(keys, targets, strict=True)):
            name = (string_offsets[key] | 0x80000000) if isinstance(key, str) else key
            if subdirs:
                target |= 0x80000000
            struct.pack_into("<II", out, at + RESOURCE_DIRECTORY_SIZE + i * RESOURCE_DIRECTORY_ENTRY_SIZE, name, target)

    type_keys = _sorted_keys(tree)
    write_table(0, type_keys, [type_offsets[k] for k in type_keys], True)
    for type_key in type_keys:
        name_keys = _sorted_keys(tree[type_key])
        write_table(type_offsets[type_key], name_keys, [name_offsets[(type_key, k)] for k in name_keys], True)
        for name_key in name_keys:
            langs = sorted(tree[type_key][name_key])
            targets = [data_entry_offsets[id(tree[type_key][name_key][lang])] for lang in langs]
            write_table(name_offsets[(type_key, name_key)], list(langs), targets, False)

    for entry in leaves:
        blob = blob_offsets[id(entry)]
        struct.pack_into("<IIII", out, data_entry_offsets[id(entry)], section_rva + blob, len(entry.data), entry.codepage, 0)
        out[blob : blob + len(entry.data)] = entry.data

    for key, at in string_offsets.items():
        encoded = key.encode("utf-16-le")
        struct.pack_into("<H", out, at, len(encoded) // 2)
        out[at + 2 : at + 2 + len(encoded)] = encoded

    logger.debug("Built resource section", entries=len(leaves), size=len(out))
    return bytes(out)
