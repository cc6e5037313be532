#
# SPDX-FileCopyrightText: Copyright (c) 2025 provide.io llc. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
#

"""File patch descriptors applied while a skeleton is streamed.

Descriptors are created once before the skeleton pass. The pass records
every hit in a ``PatchTally``; ``validate_patches`` checks afterwards that
each descriptor fired at least once.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Callable, Iterable, Sequence
from pathlib import PurePosixPath

from attrs import define, field
from provide.foundation import logger

from dirprojector.exceptions import PatchTargetNotFoundError


@define(frozen=True)
class FilePatch:
    """
    A named transformation for matching skeleton files.

    Attributes:
        name: File name reported when the patch never fires
        match: Predicate on the entry's volume path
        modify: Transformation of the entry's bytes
    """

    name: str
    match: Callable[[str], bool] = field(repr=False)
    modify: Callable[[bytes], bytes] = field(repr=False)


def basename_matcher(name: str) -> Callable[[str], bool]:
    """Match volume paths whose final component equals name, ignoring case."""
    lowered = name.lower()

    def match(volume_path: str) -> bool:
        return PurePosixPath(volume_path).name.lower() == lowered

    return match


@define
class PatchTally:
    """Hit counts per patch name, filled during one skeleton pass."""

    counts: Counter[str] = field(factory=Counter)

    def record(self, patch: FilePatch) -> None:
        self.counts[patch.name] += 1

    def hits(self, patch: FilePatch) -> int:
        return self.counts[patch.name]


def matching_patches(patches: Sequence[FilePatch], volume_path: str) -> list[FilePatch]:
    """Patches matching a path, in registration order."""
    return [patch for patch in patches if patch.match(volume_path)]


def apply_patches(data: bytes, patches: Iterable[FilePatch], tally: PatchTally) -> bytes:
    """Run each patch over data in order, recording the hits."""
    for patch in patches:
        logger.debug("Applying file patch", patch=patch.name, size=len(data))
        data = patch.modify(data)
        tally.record(patch)
    return data


def validate_patches(patches: Iterable[FilePatch], tally: PatchTally) -> None:
    """
    Check that every patch fired.

    Raises:
        PatchTargetNotFoundError: For the first patch with no hits
    """
    for patch in patches:
        hits = tally.hits(patch)
        if not hits:
            raise PatchTargetNotFoundError(patch.name)
        logger.debug("File patch applied", patch=patch.name, hits=hits)


# 🌶️📦🔚
