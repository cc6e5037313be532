#
# SPDX-FileCopyrightText: Copyright (c) 2025 provide.io llc. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
#

"""Path helpers for archive-relative (forward-slash) paths."""

from __future__ import annotations

import html


def path_relative_base(path: str, start: str, nocase: bool = False) -> str | None:
    """
    Get the part of a path below a base path.

    Args:
        path: Forward-slash separated path
        start: Base path to strip
        nocase: Compare case-insensitively

    Returns:
        Empty string if path equals start, the remainder if path lies under
        start, otherwise None
    """
    p = path.lower() if nocase else path
    s = start.lower() if nocase else start
    if p == s:
        return ""
    if p.startswith(f"{s}/"):
        return path[len(s) + 1 :]
    return None


def path_relative_base_match(path: str, start: str, nocase: bool = False) -> bool:
    """Check if path equals start or lies under it."""
    return path_relative_base(path, start, nocase) is not None


def trim_extension(path: str, ext: str, nocase: bool = False) -> str:
    """Remove ext from the end of path if present."""
    p = path.lower() if nocase else path
    e = ext.lower() if nocase else ext
    if e and p.endswith(e):
        return path[: len(path) - len(e)]
    return path


def html_encode(value: str, dq: bool = False) -> str:
    """Escape a value for HTML text, or for a double-quoted attribute when dq is set."""
    return html.escape(value, quote=dq)


# 🌶️📦🔚
