#
# SPDX-FileCopyrightText: Copyright (c) 2025 provide.io llc. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
#

"""Xtras inclusion mapping.

Maps paths under a skeleton's Xtras root to output paths. A mapping with an
empty source matches everything; a mapping without a destination keeps the
source prefix. The longest matching source wins, and the first listed mapping
wins an exact tie.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence

from attrs import define

from dirprojector.utils.paths import path_relative_base


@define(frozen=True)
class IncludeXtraMapping:
    """One ``source prefix -> destination prefix`` rule."""

    src: str
    dest: str | None = None


@define(frozen=True)
class XtraMatch:
    """The winning mapping for a path and the part of the path below its source."""

    mapping: IncludeXtraMapping
    relative: str


def mappings_from_include_xtras(include_xtras: Mapping[str, str | None] | None) -> list[IncludeXtraMapping]:
    """Convert an ordered ``{src: dest}`` mapping into rules, keeping insertion order."""
    if not include_xtras:
        return []
    return [IncludeXtraMapping(src, dest) for src, dest in include_xtras.items()]


def find_best_match(mappings: Sequence[IncludeXtraMapping], path: str) -> XtraMatch | None:
    """
    Find the mapping with the longest source prefix matching path.

    Matching is case-insensitive and only on whole path components.

    Args:
        mappings: Rules in priority order
        path: Path relative to the Xtras root

    Returns:
        The best match, or None if no rule matches
    """
    best: XtraMatch | None = None
    best_score = -1
    for mapping in mappings:
        relative = path if mapping.src == "" else path_relative_base(path, mapping.src, nocase=True)
        if relative is None or best_score >= len(mapping.src):
            continue
        best = XtraMatch(mapping, relative)
        best_score = len(mapping.src)
    return best


def destination_for(mappings: Sequence[IncludeXtraMapping], path: str) -> str | None:
    """
    Compute the output path for an Xtras entry.

    Args:
        mappings: Rules in priority order
        path: Path relative to the Xtras root

    Returns:
        Output path relative to the output Xtras directory, an empty string
        for the root itself, or None when the entry is excluded
    """
    match = find_best_match(mappings, path)
    if match is None:
        return None
    base = match.mapping.dest if match.mapping.dest is not None else match.mapping.src
    if base and match.relative:
        return f"{base}/{match.relative}"
    return base or match.relative


# 🌶️📦🔚
