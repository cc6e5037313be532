#
# SPDX-FileCopyrightText: Copyright (c) 2025 provide.io llc. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
#

"""Icon file and icon group resource utilities.

An .ico file is an ICONDIR followed by 16-byte ICONDIRENTRY records whose
last field is a file offset. An RT_GROUP_ICON resource has the same header
but 14-byte GRPICONDIRENTRY records whose last field is the RT_ICON id.
"""

import struct

from attrs import define
from provide.foundation import logger

from dirprojector.exceptions import MalformedExecutableError

from .resources import RT_GROUP_ICON, RT_ICON, ResourceEntry, ResourceKey

ICONDIR_FORMAT = "<HHH"
ICONDIRENTRY_FORMAT = "<BBBBHHII"
GRPICONDIRENTRY_FORMAT = "<BBBBHHIH"


@define
class IconImage:
    """One image of an icon file, with the directory fields that describe it."""

    width: int
    height: int
    color_count: int
    planes: int
    bit_count: int
    data: bytes


@define
class IconFile:
    """A parsed .ico container."""

    images: list[IconImage]

    @classmethod
    def from_bytes(cls, data: bytes) -> "IconFile":
        """
        Parse .ico bytes.

        Args:
            data: Icon file contents

        Returns:
            Parsed icon file

        Raises:
            MalformedExecutableError: If the header or an image is out of range
        """
        if len(data) < 6:
            raise MalformedExecutableError("Icon data too small")
        reserved, kind, count = struct.unpack_from(ICONDIR_FORMAT, data, 0)
        if reserved != 0 or kind != 1:
            raise MalformedExecutableError(f"Not an icon file: reserved={reserved} type={kind}")
        images = []
        for i in range(count):
            offset = 6 + i * 16
            if offset + 16 > len(data):
                raise MalformedExecutableError(f"Truncated icon directory entry {i}")
            width, height, colors, _, planes, bits, size, image_offset = struct.unpack_from(
                ICONDIRENTRY_FORMAT, data, offset
            )
            if image_offset + size > len(data):
                raise MalformedExecutableError(f"Icon image {i} out of range")
            images.append(
                IconImage(
                    width=width,
                    height=height,
                    color_count=colors,
                    planes=planes,
                    bit_count=bits,
                    data=bytes(data[image_offset : image_offset + size]),
                )
            )
        logger.debug("Parsed icon file", images=len(images))
        return cls(images=images)


@define
class IconGroupMember:
    width: int
    height: int
    color_count: int
    planes: int
    bit_count: int
    size: int
    icon_id: int


@define
class IconGroup:
    """An RT_GROUP_ICON resource."""

    id: ResourceKey
    lang: int
    members: list[IconGroupMember]

    @classmethod
    def from_entry(cls, entry: ResourceEntry) -> "IconGroup":
        data = entry.data
        if len(data) < 6:
            raise MalformedExecutableError(f"Icon group {entry.id!r} too small")
        _, _, count = struct.unpack_from(ICONDIR_FORMAT, data, 0)
        if len(data) < 6 + count * 14:
            raise MalformedExecutableError(f"Icon group {entry.id!r} truncated")
        members = []
        for i in range(count):
            width, height, colors, _, planes, bits, size, icon_id = struct.unpack_from(
                GRPICONDIRENTRY_FORMAT, data, 6 + i * 14
            )
            members.append(IconGroupMember(width, height, colors, planes, bits, size, icon_id))
        return cls(id=entry.id, lang=entry.lang, members=members)

    def to_bytes(self) -> bytes:
        out = bytearray(struct.pack(ICONDIR_FORMAT, 0, 1, len(self.members)))
        for m in self.members:
            out += struct.pack(
                GRPICONDIRENTRY_FORMAT,
                m.width,
                m.height,
                m.color_count,
                0,
                m.planes,
                m.bit_count,
                m.size,
                m.icon_id,
            )
        return bytes(out)


def icon_groups(entries: list[ResourceEntry]) -> list[IconGroup]:
    """Parse every RT_GROUP_ICON entry, in entry order."""
    return [IconGroup.from_entry(e) for e in entries if e.type == RT_GROUP_ICON]


def replace_icons_for_group(
    entries: list[ResourceEntry],
    group_id: ResourceKey,
    lang: int,
    images: list[IconImage],
) -> None:
    """
    Replace the images of one icon group, keeping its id and language.

    The group's old RT_ICON ids are reused first; extra images get the lowest
    ids not used by any other icon.

    Args:
        entries: Resource entries (modified in-place)
        group_id: Icon group id
        lang: Icon group language
        images: Replacement images
    """
    group_entry = next(
        (e for e in entries if e.type == RT_GROUP_ICON and e.id == group_id and e.lang == lang),
        None,
    )
    if group_entry is None:
        raise MalformedExecutableError(f"Icon group not found: {group_id!r}/{lang}")
    group = IconGroup.from_entry(group_entry)
    old_ids = [m.icon_id for m in group.members]

    entries[:] = [e for e in entries if not (e.type == RT_ICON and e.lang == lang and e.id in old_ids)]
    used = {e.id for e in entries if e.type == RT_ICON}

    def next_id() -> int:
        candidate = 1
        while candidate in used:
            candidate += 1
        return candidate

    members = []
    for i, image in enumerate(images):
        icon_id = old_ids[i] if i < len(old_ids) else next_id()
        used.add(icon_id)
        members.append(
            IconGroupMember(
                width=image.width,
                height=image.height,
                color_count=image.color_count,
                planes=image.planes,
                bit_count=image.bit_count,
                size=len(image.data),
                icon_id=icon_id,
            )
        )
        entries.append(ResourceEntry(type=RT_ICON, id=icon_id, lang=lang, data=image.data))

    group.members = members
    group_entry.data = group.to_bytes()
    logger.debug("Replaced icon group", group=group_id, lang=lang, icons=len(members))
