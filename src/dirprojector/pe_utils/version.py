#
# SPDX-FileCopyrightText: Copyright (c) 2025 provide.io llc. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
#

"""RT_VERSION (VS_VERSIONINFO) parsing and editing.

A version resource is a tree of nodes, each laid out as:
    wLength (2), wValueLength (2), wType (2), szKey (UTF-16, NUL),
    padding to 4, Value, padding to 4, Children (each 4-aligned)

wValueLength counts WORDs for text nodes (wType 1) and bytes otherwise.
Nodes not touched by an edit are re-serialized unchanged.
"""

import re
import struct

from attrs import Factory, define
from provide.foundation import logger

from dirprojector.exceptions import MalformedExecutableError

from .headers import align_up
from .resources import RT_VERSION, ResourceEntry, ResourceKey

VS_FIXEDFILEINFO_SIGNATURE = 0xFEEF04BD
VS_FIXEDFILEINFO_FORMAT = "<13I"
VS_FIXEDFILEINFO_SIZE = struct.calcsize(VS_FIXEDFILEINFO_FORMAT)

STRING_FILE_INFO = "StringFileInfo"
VAR_FILE_INFO = "VarFileInfo"
TRANSLATION = "Translation"

_VERSION_PART = re.compile(r"\d+")


def pe_version_ints(version: str) -> tuple[int, int] | None:
    """
    Convert a dotted version string to the MS/LS pair of VS_FIXEDFILEINFO.

    Up to four "." or "," separated parts are used; each must be a decimal
    16-bit integer, missing parts count as zero.

    Args:
        version: Version string such as "1.2.3.4"

    Returns:
        Tuple of (ms, ls), or None if any part is not a 16-bit integer

    Examples:
        >>> pe_version_ints("1.2.3.4")
        (65538, 196612)
        >>> pe_version_ints("1.2 beta") is None
        True
    """
    numbers = []
    for part in re.split(r"[.,]", version):
        if not _VERSION_PART.fullmatch(part) or int(part) > 0xFFFF:
            return None
        numbers.append(int(part))
    numbers += [0] * (4 - len(numbers))
    return ((numbers[0] << 16) | numbers[1], (numbers[2] << 16) | numbers[3])


@define
class VersionNode:
    """One node of the version resource tree."""

    key: str
    value: bytes = b""
    text: bool = False
    children: list["VersionNode"] = Factory(list)

    @classmethod
    def parse(cls, data: bytes, offset: int = 0) -> tuple["VersionNode", int]:
        """
        Parse the node at offset.

        Returns:
            Tuple of (node, end offset of the node)
        """
        if offset + 6 > len(data):
            raise MalformedExecutableError(f"Truncated version node at 0x{offset:x}")
        length, value_length, kind = struct.unpack_from("<HHH", data, offset)
        end = offset + length
        if length < 6 or end > len(data):
            raise MalformedExecutableError(f"Invalid version node length {length} at 0x{offset:x}")

        pos = offset + 6
        key_end = pos
        while key_end + 1 < end and data[key_end : key_end + 2] != b"\x00\x00":
            key_end += 2
        key = data[pos:key_end].decode("utf-16-le")
        pos = align_up(key_end + 2, 4)

        value_size = value_length * 2 if kind == 1 else value_length
        value = bytes(data[pos : min(pos + value_size, end)])
        pos = align_up(pos + value_size, 4)

        children = []
        while pos < end:
            child, child_end = cls.parse(data, pos)
            children.append(child)
            pos = align_up(child_end, 4)
        return cls(key=key, value=value, text=kind == 1, children=children), end

    def to_bytes(self) -> bytes:
        out = bytearray(6)
        out += (self.key + "\x00").encode("utf-16-le")
        out += b"\x00" * (align_up(len(out), 4) - len(out))
        out += self.value
        for child in self.children:
            out += b"\x00" * (align_up(len(out), 4) - len(out))
            out += child.to_bytes()
        value_length = len(self.value) // 2 if self.text else len(self.value)
        struct.pack_into("<HHH", out, 0, len(out), value_length, 1 if self.text else 0)
        return bytes(out)

    def child(self, key: str) -> "VersionNode | None":
        for node in self.children:
            if node.key.upper() == key.upper():
                return node
        return None

    @property
    def string(self) -> str:
        return self.value.decode("utf-16-le", errors="replace").rstrip("\x00")

    @string.setter
    def string(self, value: str) -> None:
        self.value = (value + "\x00").encode("utf-16-le")
        self.text = True


@define
class FixedFileInfo:
    """VS_FIXEDFILEINFO numeric fields."""

    signature: int = VS_FIXEDFILEINFO_SIGNATURE
    struc_version: int = 0x10000
    file_version_ms: int = 0
    file_version_ls: int = 0
    product_version_ms: int = 0
    product_version_ls: int = 0
    file_flags_mask: int = 0x3F
    file_flags: int = 0
    file_os: int = 0x4
    file_type: int = 0x1
    file_subtype: int = 0
    file_date_ms: int = 0
    file_date_ls: int = 0

    @classmethod
    def from_bytes(cls, data: bytes) -> "FixedFileInfo":
        if len(data) < VS_FIXEDFILEINFO_SIZE:
            raise MalformedExecutableError(f"VS_FIXEDFILEINFO too small: {len(data)}")
        fields = struct.unpack_from(VS_FIXEDFILEINFO_FORMAT, data, 0)
        if fields[0] != VS_FIXEDFILEINFO_SIGNATURE:
            raise MalformedExecutableError(f"Bad VS_FIXEDFILEINFO signature: 0x{fields[0]:08x}")
        return cls(*fields)

    def to_bytes(self) -> bytes:
        return struct.pack(
            VS_FIXEDFILEINFO_FORMAT,
            self.signature,
            self.struc_version,
            self.file_version_ms,
            self.file_version_ls,
            self.product_version_ms,
            self.product_version_ls,
            self.file_flags_mask,
            self.file_flags,
            self.file_os,
            self.file_type,
            self.file_subtype,
            self.file_date_ms,
            self.file_date_ls,
        )


@define
class VersionInfo:
    """An editable RT_VERSION resource."""

    id: ResourceKey
    lang: int
    root: VersionNode
    fixed: FixedFileInfo

    @classmethod
    def from_entry(cls, entry: ResourceEntry) -> "VersionInfo":
        root, _ = VersionNode.parse(entry.data)
        fixed = FixedFileInfo.from_bytes(root.value) if root.value else FixedFileInfo()
        return cls(id=entry.id, lang=entry.lang, root=root, fixed=fixed)

    @classmethod
    def from_entries(cls, entries: list[ResourceEntry]) -> list["VersionInfo"]:
        return [cls.from_entry(e) for e in entries if e.type == RT_VERSION]

    def _string_tables(self) -> list[VersionNode]:
        sfi = self.root.child(STRING_FILE_INFO)
        return list(sfi.children) if sfi else []

    def translations(self) -> list[tuple[int, int]]:
        """Language/codepage pairs listed in VarFileInfo."""
        vfi = self.root.child(VAR_FILE_INFO)
        var = vfi.child(TRANSLATION) if vfi else None
        if var is None:
            return []
        count = len(var.value) // 4
        return [struct.unpack_from("<HH", var.value, i * 4) for i in range(count)]

    def languages(self) -> list[tuple[int, int]]:
        """Every language/codepage pair from string tables and translations."""
        found: list[tuple[int, int]] = []
        for table in self._string_tables():
            try:
                pair = (int(table.key[:4], 16), int(table.key[4:8], 16))
            except ValueError:
                logger.warning("Ignoring string table with invalid key", key=table.key)
                continue
            if pair not in found:
                found.append(pair)
        for pair in self.translations():
            if pair not in found:
                found.append(pair)
        return found

    def get_string_values(self, lang: int, codepage: int) -> dict[str, str]:
        sfi = self.root.child(STRING_FILE_INFO)
        table = sfi.child(f"{lang:04X}{codepage:04X}") if sfi else None
        if table is None:
            return {}
        return {node.key: node.string for node in table.children}

    def set_string_values(self, lang: int, codepage: int, values: dict[str, str]) -> None:
        """
        Set strings in one string table, creating the table if needed.

        Keys not in values are left untouched.
        """
        sfi = self.root.child(STRING_FILE_INFO)
        if sfi is None:
            sfi = VersionNode(key=STRING_FILE_INFO, text=True)
            self.root.children.insert(0, sfi)
        table_key = f"{lang:04X}{codepage:04X}"
        table = sfi.child(table_key)
        if table is None:
            table = VersionNode(key=table_key, text=True)
            sfi.children.append(table)
        for key, value in values.items():
            node = table.child(key)
            if node is None:
                node = VersionNode(key=key)
                table.children.append(node)
            node.string = value
        logger.trace("Set version strings", table=table_key, keys=list(values))

    def to_bytes(self) -> bytes:
        self.root.value = self.fixed.to_bytes()
        return self.root.to_bytes()

    def output_to_entries(self, entries: list[ResourceEntry]) -> None:
        """Write this version info back over its resource entry."""
        for entry in entries:
            if entry.type == RT_VERSION and entry.id == self.id and entry.lang == self.lang:
                entry.data = self.to_bytes()
                return
        entries.append(ResourceEntry(type=RT_VERSION, id=self.id, lang=self.lang, data=self.to_bytes()))
