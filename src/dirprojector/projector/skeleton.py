#
# SPDX-FileCopyrightText: Copyright (c) 2025 provide.io llc. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
#

"""Entry handlers and the single-pass skeleton transform.

A platform describes its skeleton as an ordered list of handlers plus the
marker names that must be seen. Each entry goes to the first handler that
claims it; unclaimed entries are dropped.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from pathlib import Path

from attrs import define, field
from provide.foundation import logger

from dirprojector.archive import Archive, DirectoryModes, Entry, PathType, write_file
from dirprojector.exceptions import MissingSkeletonEntryError
from dirprojector.projector.patches import FilePatch, PatchTally, apply_patches, matching_patches
from dirprojector.projector.xtras import IncludeXtraMapping, destination_for
from dirprojector.utils.paths import path_relative_base


@define(frozen=True)
class Claim:
    """A handler's decision for an entry. A dest of None drops the entry."""

    dest: Path | None = None


SKIP = Claim()

# Returns None when the handler does not claim the entry.
EntryHandler = Callable[[Entry, set[str]], Claim | None]


@define(frozen=True)
class SkeletonRules:
    """
    How one platform reads its skeleton.

    Attributes:
        handlers: Tried in order for every entry
        required: Markers that must be found, in reporting order
    """

    handlers: Sequence[EntryHandler]
    required: Sequence[str] = field(factory=tuple)


def xtras_handler(xtras_name: str, mappings: Sequence[IncludeXtraMapping], xtras_path: Path) -> EntryHandler:
    """
    Claim everything under the skeleton's Xtras root.

    The root itself is recorded as the ``xtras_name`` marker. Entries the
    mappings exclude, or that map to an empty path, are claimed and dropped.
    """

    def handle(entry: Entry, found: set[str]) -> Claim | None:
        relative = path_relative_base(entry.volume_path, xtras_name, nocase=True)
        if relative is None:
            return None
        found.add(xtras_name)
        dest = destination_for(mappings, relative)
        if not dest:
            logger.trace("Excluding Xtras entry", path=entry.volume_path)
            return SKIP
        return Claim(xtras_path / dest)

    return handle


def is_empty_resource_fork(entry: Entry) -> bool:
    return entry.type is PathType.RESOURCE_FORK and not entry.size


def extract_entry(
    entry: Entry,
    dest: Path,
    patches: Sequence[FilePatch],
    tally: PatchTally,
    directory_modes: DirectoryModes | None = None,
) -> None:
    """
    Extract a claimed entry, running any matching patches over file data.

    Patched files keep the entry's mode and modification time. Directory
    modes go to directory_modes when given.
    """
    matched = matching_patches(patches, entry.volume_path) if entry.type is PathType.FILE else []
    if not matched:
        logger.trace("Extracting entry", path=entry.volume_path, dest=str(dest), type=entry.type.value)
        entry.extract(dest, directory_modes)
        return

    data = apply_patches(entry.read(), matched, tally)
    write_file(dest, data, entry.mode, entry.mtime)
    logger.debug("Wrote patched entry", path=entry.volume_path, dest=str(dest), size=len(data))


def transform_skeleton(
    archive: Archive,
    rules: SkeletonRules,
    patches: Sequence[FilePatch] = (),
) -> PatchTally:
    """
    Stream a skeleton once, extracting claimed entries.

    Args:
        archive: Skeleton reader
        rules: Platform handlers and required markers
        patches: File patches to apply to claimed files

    Returns:
        The patch hits recorded during the pass

    Raises:
        MissingSkeletonEntryError: Naming every required marker not seen
    """
    found: set[str] = set()
    tally = PatchTally()
    directory_modes = DirectoryModes()
    claimed = 0
    dropped = 0

    def visit(entry: Entry) -> None:
        nonlocal claimed, dropped
        if is_empty_resource_fork(entry):
            return
        for handler in rules.handlers:
            claim = handler(entry, found)
            if claim is None:
                continue
            claimed += 1
            if claim.dest is not None:
                extract_entry(entry, claim.dest, patches, tally, directory_modes)
            return
        dropped += 1
        logger.trace("Dropping unclaimed entry", path=entry.volume_path)

    archive.read(visit)
    directory_modes.apply()
    logger.debug("Skeleton pass complete", claimed=claimed, dropped=dropped, markers=sorted(found))

    missing = [marker for marker in rules.required if marker not in found]
    if missing:
        raise MissingSkeletonEntryError(missing)
    return tally


# 🌶️📦🔚
